from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from src.domain.entities.image import SourceImage
from src.domain.entities.tool import Tool


class ResizeType(str, Enum):
    PIXELS = "pixels"
    PERCENTAGE = "percentage"
    RATIO = "ratio"


@dataclass(frozen=True)
class ResizeRequest:
    tool: ClassVar[Tool] = Tool.RESIZE

    source: SourceImage
    width: int
    height: int
    resize_type: ResizeType


@dataclass(frozen=True)
class BulkResizeRequest:
    tool: ClassVar[Tool] = Tool.BULK_RESIZE

    sources: tuple[SourceImage, ...]
    width: int
    height: int


@dataclass(frozen=True)
class CompressRequest:
    tool: ClassVar[Tool] = Tool.COMPRESS

    source: SourceImage
    quality: int


@dataclass(frozen=True)
class ConvertRequest:
    tool: ClassVar[Tool] = Tool.CONVERT

    source: SourceImage
    # kept as the raw string; unsupported values fail at resolution time
    target_format: str


@dataclass(frozen=True)
class IconConvertRequest:
    tool: ClassVar[Tool] = Tool.ICON_CONVERT

    source: SourceImage
    sizes: tuple[int, ...]


@dataclass(frozen=True)
class IconEditRequest:
    tool: ClassVar[Tool] = Tool.ICON_EDIT

    source: SourceImage
    size: int
    background_color: str


@dataclass(frozen=True)
class FaviconRequest:
    tool: ClassVar[Tool] = Tool.FAVICON_GENERATE

    source: SourceImage | None = None
    text: str | None = None
    background_color: str | None = None
    text_color: str | None = None


TransformRequest = Union[
    ResizeRequest,
    BulkResizeRequest,
    CompressRequest,
    ConvertRequest,
    IconConvertRequest,
    IconEditRequest,
    FaviconRequest,
]
