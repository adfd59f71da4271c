from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from src.application.dtos.common_dto import ErrorResponse
from src.application.dtos.tool_dto import (
    BulkResizeItem,
    BulkResizeResponse,
    FileNameResponse,
    IconSetResponse,
    ResizeResponse,
    ToolInfo,
    ToolListResponse,
)
from src.application.use_cases.run_tool import RunToolUseCase, split_icon_results
from src.domain.entities.image import PublishedResult
from src.domain.entities.requests import TransformRequest
from src.domain.entities.tool import TOOL_PROFILES
from src.domain.exceptions import InvalidRequestError
from src.infrastructure.api.dependencies import get_run_tool_use_case
from src.infrastructure.api.errors import PROCESSING_FAILED, PROCESSING_FAILED_BULK, ToolFailedError
from src.infrastructure.api.forms import (
    build_bulk_resize_request,
    build_compress_request,
    build_convert_request,
    build_favicon_request,
    build_icon_convert_request,
    build_icon_edit_request,
    build_resize_request,
    read_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Image Tools"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Missing or malformed form fields"},
        500: {"model": ErrorResponse, "description": "Processing Error - The image could not be processed or stored"},
    },
)


async def _run(
    use_case: RunToolUseCase,
    request: TransformRequest,
    failure_message: str = PROCESSING_FAILED,
) -> list[PublishedResult]:
    try:
        return await use_case.execute(request)
    except InvalidRequestError:
        raise
    except Exception as exc:
        logger.exception("Error running %s", request.tool.value)
        raise ToolFailedError(failure_message) from exc


@router.get(
    "/tools",
    response_model=ToolListResponse,
    summary="List Image Tools",
    description="List every tool endpoint with its output formats and storage key prefix.",
)
def list_tools():
    """List available tools."""
    tools = [
        ToolInfo(
            name=profile.tool.value,
            path=profile.path,
            prefix=profile.prefix,
            output_formats=[fmt.value for fmt in profile.output_formats],
            signed_url=profile.signs_urls,
            fixed_sizes=list(profile.fixed_sizes),
        )
        for profile in TOOL_PROFILES.values()
    ]
    return ToolListResponse(tools=tools)


@router.post(
    "/resize",
    response_model=ResizeResponse,
    summary="Resize Image",
    description="""
    Resize a single image and return a signed download URL.

    **Resize types:**
    - `pixels` - output is exactly `width` x `height` (scaled and center-cropped)
    - `percentage` - `width` and `height` are percentages of the source dimensions
    - `ratio` - fit inside `width` x `height` keeping the aspect ratio, no cropping

    **Output**: WebP, stored as `resized-<timestamp>.webp`
    **Signed URL**: valid for 1 hour
    """,
    response_description="Storage key and signed URL of the resized image",
)
async def resize_image(
    file: UploadFile | None = File(None, description="Image file to resize"),
    width: str | None = Form(None, description="Target width (pixels or percent)"),
    height: str | None = Form(None, description="Target height (pixels or percent)"),
    resize_type: str | None = Form(None, alias="resizeType", description="pixels, percentage or ratio"),
    use_case: RunToolUseCase = Depends(get_run_tool_use_case),
):
    """Resize an image and return its signed URL."""
    request = build_resize_request(await read_upload(file), width, height, resize_type)
    (result,) = await _run(use_case, request)
    return ResizeResponse(file_name=result.file_name, signed_url=result.signed_url)


@router.post(
    "/bulk-resize",
    response_model=BulkResizeResponse,
    summary="Bulk Resize Images",
    description="""
    Resize several images to the same bounding box in one request.

    Every file is fitted inside `width` x `height` (aspect ratio kept), encoded as
    WebP and stored as `bulk-resized-<timestamp>-<original name>.webp`.
    Results are returned in upload order. If any file fails, the whole request fails.
    """,
    response_description="One entry per uploaded file with its signed URL",
)
async def bulk_resize_images(
    files: list[UploadFile] | None = File(None, description="Image files to resize"),
    width: str | None = Form(None, description="Bounding box width in pixels"),
    height: str | None = Form(None, description="Bounding box height in pixels"),
    use_case: RunToolUseCase = Depends(get_run_tool_use_case),
):
    """Resize every uploaded image."""
    sources = []
    for upload in files or []:
        source = await read_upload(upload)
        if source is not None:
            sources.append(source)
    request = build_bulk_resize_request(sources, width, height)
    results = await _run(use_case, request, PROCESSING_FAILED_BULK)
    return BulkResizeResponse(
        results=[
            BulkResizeItem(original_name=r.label, resized_name=r.file_name, signed_url=r.signed_url)
            for r in results
        ]
    )


@router.post(
    "/compress",
    response_model=FileNameResponse,
    summary="Compress Image",
    description="Re-encode an image as WebP at the given `quality` (1-100). No resizing.",
)
async def compress_image(
    file: UploadFile | None = File(None, description="Image file to compress"),
    quality: str | None = Form(None, description="Encoder quality from 1 to 100"),
    use_case: RunToolUseCase = Depends(get_run_tool_use_case),
):
    request = build_compress_request(await read_upload(file), quality)
    (result,) = await _run(use_case, request)
    return FileNameResponse(file_name=result.file_name)


@router.post(
    "/convert",
    response_model=FileNameResponse,
    summary="Convert Image Format",
    description="""
    Re-encode an image to `png`, `jpeg` or `webp`.

    Any other format value is rejected as a processing error (500).
    """,
)
async def convert_image(
    file: UploadFile | None = File(None, description="Image file to convert"),
    format: str | None = Form(None, description="Target format: png, jpeg or webp"),
    use_case: RunToolUseCase = Depends(get_run_tool_use_case),
):
    request = build_convert_request(await read_upload(file), format)
    (result,) = await _run(use_case, request)
    return FileNameResponse(file_name=result.file_name)


@router.post(
    "/icon-converter",
    response_model=IconSetResponse,
    summary="Convert Image To Icons",
    description="""
    Produce one square PNG per requested size plus an `.ico` file at the first size.

    `sizes` is a JSON array of positive integers, e.g. `[16, 32, 48]`.
    """,
)
async def convert_to_icons(
    file: UploadFile | None = File(None, description="Image file to convert"),
    sizes: str | None = Form(None, description="JSON array of icon sizes"),
    use_case: RunToolUseCase = Depends(get_run_tool_use_case),
):
    request = build_icon_convert_request(await read_upload(file), sizes)
    results = await _run(use_case, request)
    ico, pngs = split_icon_results(results)
    return IconSetResponse(ico_file_name=ico.file_name, png_file_names=[r.file_name for r in pngs])


@router.post(
    "/icon-editor",
    response_model=FileNameResponse,
    summary="Edit Icon",
    description="Resize an image to a `size` x `size` PNG icon over `backgroundColor`.",
)
async def edit_icon(
    file: UploadFile | None = File(None, description="Image file to turn into an icon"),
    size: str | None = Form(None, description="Icon edge length in pixels"),
    background_color: str | None = Form(None, alias="backgroundColor", description="Background color, e.g. #ffffff"),
    use_case: RunToolUseCase = Depends(get_run_tool_use_case),
):
    request = build_icon_edit_request(await read_upload(file), size, background_color)
    (result,) = await _run(use_case, request)
    return FileNameResponse(file_name=result.file_name)


@router.post(
    "/favicon-generator",
    response_model=IconSetResponse,
    summary="Generate Favicons",
    description="""
    Generate a favicon set from an uploaded image or from text.

    Without a file, a 256x256 canvas filled with `backgroundColor` is drawn with
    `text` centered in `textColor`. PNGs are produced at 16, 32, 48, 64, 128 and
    256 pixels, plus a 32x32 `favicon-<timestamp>.ico`.
    """,
)
async def generate_favicon(
    file: UploadFile | None = File(None, description="Optional base image"),
    text: str | None = Form(None, description="Text drawn on the canvas when no file is sent"),
    background_color: str | None = Form(None, alias="backgroundColor", description="Canvas color, e.g. #ffffff"),
    text_color: str | None = Form(None, alias="textColor", description="Text color, e.g. #000000"),
    use_case: RunToolUseCase = Depends(get_run_tool_use_case),
):
    request = build_favicon_request(await read_upload(file), text, background_color, text_color)
    results = await _run(use_case, request)
    ico, pngs = split_icon_results(results)
    return IconSetResponse(ico_file_name=ico.file_name, png_file_names=[r.file_name for r in pngs])
