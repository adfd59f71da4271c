from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from src.domain.entities.tool import OutputFormat
from src.infrastructure.api.dependencies import get_storage
from src.infrastructure.storage.supabase_storage import LOCAL_URL_PREFIX, SupabaseStorage

router = APIRouter(prefix=LOCAL_URL_PREFIX, tags=["Local Storage"])


def _content_type(path: str) -> str:
    ext = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    try:
        return OutputFormat(ext).content_type
    except ValueError:
        return "application/octet-stream"


@router.get(
    "/{path:path}",
    summary="Download Stored Artifact (local mode)",
    description="""
    Serve an artifact written by the local storage fallback.

    Only reachable through a signed URL returned by the resize tools: the
    `expires` timestamp must be in the future and `signature` must match.
    Disabled when Supabase storage is configured.
    """,
    responses={
        403: {"description": "Signature invalid or expired"},
        404: {"description": "Object not found or local storage disabled"},
    },
)
def download_local(
    path: str,
    expires: int = Query(..., description="Expiry as a Unix timestamp"),
    signature: str = Query(..., description="HMAC signature of path and expiry"),
    storage: SupabaseStorage = Depends(get_storage),
):
    if not storage.is_local:
        raise HTTPException(status_code=404, detail="Not found")
    if not storage.verify_local_signature(path, expires, signature):
        raise HTTPException(status_code=403, detail="Invalid or expired signature")
    try:
        data = storage.download_bytes(path)
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=404, detail="Not found") from exc
    return Response(content=data, media_type=_content_type(path))
