from __future__ import annotations

import hashlib
import hmac
import os
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote, urlencode

from supabase import Client

LOCAL_URL_PREFIX = "/local-storage"


@dataclass
class StorageResult:
    path: str
    content_type: str
    size: int


class SupabaseStorage:
    """Storage adapter for Supabase Storage with a local fake fallback."""

    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.bucket = os.getenv("SUPABASE_STORAGE_BUCKET", "images")
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.local_dir = Path(os.getenv("SUPABASE_STORAGE_LOCAL_DIR", ".local_storage"))
        self.signing_secret = os.getenv("LOCAL_SIGNING_SECRET", "image-tools-local")
        if self.is_local:
            self.local_dir.mkdir(parents=True, exist_ok=True)

    @property
    def is_local(self) -> bool:
        return self.disabled or self.client is None

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> StorageResult:
        if self.is_local:
            # local fake storage
            full_path = self._local_path(path)
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
            return StorageResult(path=path, content_type=content_type, size=len(data))
        # real upload
        try:  # pragma: no cover - network
            self.client.storage.from_(self.bucket).upload(  # type: ignore[attr-defined]
                path=path,
                file=data,
                file_options={"content-type": content_type, "upsert": "false"},
            )
            return StorageResult(path=path, content_type=content_type, size=len(data))
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Storage upload failed: {exc}") from exc

    def create_signed_url(self, path: str, expires_in: int) -> str:
        if self.is_local:
            expires = int(time.time()) + int(expires_in)
            query = urlencode({"expires": expires, "signature": self.local_signature(path, expires)})
            return f"{LOCAL_URL_PREFIX}/{quote(path)}?{query}"
        try:  # pragma: no cover - network
            res = self.client.storage.from_(self.bucket).create_signed_url(path, expires_in)  # type: ignore[attr-defined]
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Signed URL creation failed: {exc}") from exc
        url = res.get("signedURL") or res.get("signedUrl")  # pragma: no cover - network
        if not url:  # pragma: no cover
            raise RuntimeError(f"Signed URL missing from storage response for {path}")
        return url

    def download_bytes(self, path: str) -> bytes:
        if self.is_local:
            return self._local_path(path).read_bytes()
        return self.client.storage.from_(self.bucket).download(path)  # type: ignore[attr-defined]  # pragma: no cover

    def local_signature(self, path: str, expires: int) -> str:
        message = f"{path}:{expires}".encode()
        return hmac.new(self.signing_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_local_signature(self, path: str, expires: int, signature: str) -> bool:
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(self.local_signature(path, expires), signature)

    def _local_path(self, path: str) -> Path:
        root = self.local_dir.resolve()
        full_path = (root / path).resolve()
        if root not in full_path.parents:
            raise ValueError(f"Invalid storage path: {path}")
        return full_path
