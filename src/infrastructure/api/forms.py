"""Turn raw multipart form values into typed tool requests.

Every failure here is an InvalidRequestError, raised before any image is
decoded or anything is written to storage.
"""
from __future__ import annotations

import json
import os

from fastapi import UploadFile

from src.domain.entities.image import SourceImage
from src.domain.entities.requests import (
    BulkResizeRequest,
    CompressRequest,
    ConvertRequest,
    FaviconRequest,
    IconConvertRequest,
    IconEditRequest,
    ResizeRequest,
    ResizeType,
)
from src.domain.exceptions import InvalidRequestError

MISSING_FIELDS = "Missing required fields"

DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024
DEFAULT_MAX_DIMENSION = 10000


def max_upload_bytes() -> int:
    return int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES)))


def max_dimension() -> int:
    """Largest output edge, in pixels, a request may ask for."""
    return int(os.getenv("MAX_IMAGE_DIMENSION", str(DEFAULT_MAX_DIMENSION)))


async def read_upload(file: UploadFile | None) -> SourceImage | None:
    """Read an uploaded part; an absent or empty part counts as missing."""
    if file is None:
        return None
    data = await file.read()
    if not data:
        return None
    limit = max_upload_bytes()
    if len(data) > limit:
        raise InvalidRequestError(f"File {file.filename or ''} exceeds the {limit} byte upload limit")
    return SourceImage(data=data, filename=file.filename or None, content_type=file.content_type)


def _require(*values: object) -> None:
    for value in values:
        if value is None or value == "":
            raise InvalidRequestError(MISSING_FIELDS)


def parse_positive_int(value: str | None, field: str, *, maximum: int | None = None) -> int:
    _require(value)
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise InvalidRequestError(f"{field} must be an integer") from exc
    if number <= 0:
        raise InvalidRequestError(f"{field} must be greater than zero")
    if maximum is not None and number > maximum:
        raise InvalidRequestError(f"{field} must be at most {maximum}")
    return number


def parse_sizes(raw: str | None) -> tuple[int, ...]:
    _require(raw)
    try:
        values = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError("sizes must be a JSON array of integers") from exc
    if not isinstance(values, list) or not values:
        raise InvalidRequestError(MISSING_FIELDS)
    limit = max_dimension()
    sizes = []
    for value in values:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidRequestError("sizes must contain positive integers only")
        if value > limit:
            raise InvalidRequestError(f"sizes must be at most {limit}")
        if value in sizes:
            raise InvalidRequestError(f"sizes must not repeat: {value}")
        sizes.append(value)
    return tuple(sizes)


def build_resize_request(
    source: SourceImage | None, width: str | None, height: str | None, resize_type: str | None
) -> ResizeRequest:
    _require(source, width, height, resize_type)
    try:
        kind = ResizeType(resize_type)
    except ValueError as exc:
        raise InvalidRequestError("resizeType must be one of pixels, percentage, ratio") from exc
    return ResizeRequest(
        source=source,
        width=parse_positive_int(width, "width", maximum=max_dimension()),
        height=parse_positive_int(height, "height", maximum=max_dimension()),
        resize_type=kind,
    )


def build_bulk_resize_request(
    sources: list[SourceImage], width: str | None, height: str | None
) -> BulkResizeRequest:
    if not sources:
        raise InvalidRequestError(MISSING_FIELDS)
    return BulkResizeRequest(
        sources=tuple(sources),
        width=parse_positive_int(width, "width", maximum=max_dimension()),
        height=parse_positive_int(height, "height", maximum=max_dimension()),
    )


def build_compress_request(source: SourceImage | None, quality: str | None) -> CompressRequest:
    _require(source, quality)
    return CompressRequest(source=source, quality=parse_positive_int(quality, "quality", maximum=100))


def build_convert_request(source: SourceImage | None, fmt: str | None) -> ConvertRequest:
    # the format value itself is checked during resolution, not here
    _require(source, fmt)
    return ConvertRequest(source=source, target_format=fmt.strip())


def build_icon_convert_request(source: SourceImage | None, sizes: str | None) -> IconConvertRequest:
    _require(source, sizes)
    return IconConvertRequest(source=source, sizes=parse_sizes(sizes))


def build_icon_edit_request(
    source: SourceImage | None, size: str | None, background_color: str | None
) -> IconEditRequest:
    _require(source, size, background_color)
    return IconEditRequest(
        source=source,
        size=parse_positive_int(size, "size", maximum=max_dimension()),
        background_color=background_color.strip(),
    )


def build_favicon_request(
    source: SourceImage | None,
    text: str | None,
    background_color: str | None,
    text_color: str | None,
) -> FaviconRequest:
    text = (text or "").strip() or None
    if source is None and text is None:
        raise InvalidRequestError(MISSING_FIELDS)
    if source is None:
        _require(background_color, text_color)
    return FaviconRequest(
        source=source,
        text=text,
        background_color=(background_color or "").strip() or None,
        text_color=(text_color or "").strip() or None,
    )
