from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response base: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResizeResponse(CamelModel):
    """Response for a single-image resize."""
    success: bool = Field(True, description="Indicates the operation was successful")
    file_name: str = Field(..., description="Storage key of the resized image", examples=["resized-1717171717171.webp"])
    signed_url: str = Field(..., description="Time-limited URL to download the resized image (valid 1 hour)")


class BulkResizeItem(CamelModel):
    original_name: str = Field(..., description="File name as uploaded", examples=["photo.jpg"])
    resized_name: str = Field(
        ..., description="Storage key of the resized image", examples=["bulk-resized-1717171717171-photo.jpg.webp"]
    )
    signed_url: str = Field(..., description="Time-limited URL to download the resized image (valid 1 hour)")


class BulkResizeResponse(CamelModel):
    """Response for a bulk resize, one entry per uploaded file in upload order."""
    success: bool = Field(True, description="Indicates the operation was successful")
    results: list[BulkResizeItem] = Field(..., description="Resized images in upload order")


class FileNameResponse(CamelModel):
    """Response for tools producing one stored file (compress, convert, icon editor)."""
    success: bool = Field(True, description="Indicates the operation was successful")
    file_name: str = Field(..., description="Storage key of the produced image", examples=["compressed-1717171717171.webp"])


class IconSetResponse(CamelModel):
    """Response for tools producing an icon file plus one PNG per size."""
    success: bool = Field(True, description="Indicates the operation was successful")
    ico_file_name: str = Field(..., description="Storage key of the .ico file", examples=["favicon-1717171717171.ico"])
    png_file_names: list[str] = Field(
        ..., description="Storage keys of the PNG renditions, in size order", examples=[["favicon-1717171717171-16.png"]]
    )


class ToolInfo(CamelModel):
    name: str = Field(..., description="Tool identifier", examples=["resize"])
    path: str = Field(..., description="Endpoint accepting the multipart form", examples=["/api/resize"])
    prefix: str = Field(..., description="Prefix of generated storage keys", examples=["resized"])
    output_formats: list[str] = Field(..., description="Formats the tool produces", examples=[["webp"]])
    signed_url: bool = Field(..., description="Whether the response carries signed download URLs")
    fixed_sizes: list[int] = Field(default_factory=list, description="Sizes always generated by the tool")


class ToolListResponse(BaseModel):
    tools: list[ToolInfo] = Field(..., description="Available image tools")
