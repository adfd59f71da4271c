from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Tool(str, Enum):
    RESIZE = "resize"
    BULK_RESIZE = "bulk-resize"
    COMPRESS = "compress"
    CONVERT = "convert"
    ICON_CONVERT = "icon-convert"
    ICON_EDIT = "icon-edit"
    FAVICON_GENERATE = "favicon-generate"


class OutputFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"
    ICO = "ico"

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self]

    @property
    def extension(self) -> str:
        return self.value


CONTENT_TYPES: dict[OutputFormat, str] = {
    OutputFormat.PNG: "image/png",
    OutputFormat.JPEG: "image/jpeg",
    OutputFormat.WEBP: "image/webp",
    OutputFormat.ICO: "image/x-icon",
}

# Formats a caller may ask the convert tool for.
CONVERTIBLE_FORMATS: frozenset[OutputFormat] = frozenset(
    {OutputFormat.PNG, OutputFormat.JPEG, OutputFormat.WEBP}
)

# The icon container cannot hold frames larger than this.
ICO_MAX_SIZE = 256

SIGNED_URL_TTL_SECONDS = 3600

# Label carried by the icon-container artifact of an icon set.
ICO_LABEL = "ico"


@dataclass(frozen=True)
class ToolProfile:
    """Static configuration for one tool: naming, output and URL policy."""

    tool: Tool
    path: str
    prefix: str
    output_formats: tuple[OutputFormat, ...]
    signs_urls: bool = False
    fixed_sizes: tuple[int, ...] = ()
    ico_size: int | None = None
    canvas_size: int | None = None
    font_size: int | None = None


TOOL_PROFILES: dict[Tool, ToolProfile] = {
    Tool.RESIZE: ToolProfile(
        tool=Tool.RESIZE,
        path="/api/resize",
        prefix="resized",
        output_formats=(OutputFormat.WEBP,),
        signs_urls=True,
    ),
    Tool.BULK_RESIZE: ToolProfile(
        tool=Tool.BULK_RESIZE,
        path="/api/bulk-resize",
        prefix="bulk-resized",
        output_formats=(OutputFormat.WEBP,),
        signs_urls=True,
    ),
    Tool.COMPRESS: ToolProfile(
        tool=Tool.COMPRESS,
        path="/api/compress",
        prefix="compressed",
        output_formats=(OutputFormat.WEBP,),
    ),
    Tool.CONVERT: ToolProfile(
        tool=Tool.CONVERT,
        path="/api/convert",
        prefix="converted",
        output_formats=(OutputFormat.PNG, OutputFormat.JPEG, OutputFormat.WEBP),
    ),
    Tool.ICON_CONVERT: ToolProfile(
        tool=Tool.ICON_CONVERT,
        path="/api/icon-converter",
        prefix="icon",
        output_formats=(OutputFormat.PNG, OutputFormat.ICO),
    ),
    Tool.ICON_EDIT: ToolProfile(
        tool=Tool.ICON_EDIT,
        path="/api/icon-editor",
        prefix="icon",
        output_formats=(OutputFormat.PNG,),
    ),
    Tool.FAVICON_GENERATE: ToolProfile(
        tool=Tool.FAVICON_GENERATE,
        path="/api/favicon-generator",
        prefix="favicon",
        output_formats=(OutputFormat.PNG, OutputFormat.ICO),
        fixed_sizes=(16, 32, 48, 64, 128, 256),
        ico_size=32,
        canvas_size=256,
        font_size=128,
    ),
}


def profile_for(tool: Tool) -> ToolProfile:
    return TOOL_PROFILES[tool]
