from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from src.domain.entities.tool import OutputFormat


@dataclass(frozen=True)
class SourceImage:
    """Uploaded (or synthesised) image bytes, owned by a single request."""

    data: bytes = field(repr=False)
    filename: str | None = None
    content_type: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class Fit(str, Enum):
    COVER = "cover"  # scale and center-crop to exactly width x height
    CONTAIN = "contain"  # scale to fit inside width x height, aspect preserved


@dataclass(frozen=True)
class ResizeOp:
    width: int
    height: int
    fit: Fit = Fit.COVER


@dataclass(frozen=True)
class ExtendOp:
    top: int
    right: int
    bottom: int
    left: int
    background: str


Operation = Union[ResizeOp, ExtendOp]


@dataclass(frozen=True)
class TransformSpec:
    file_name: str
    output_format: OutputFormat
    operations: tuple[Operation, ...] = ()
    quality: int | None = None
    sign_url: bool = False
    # size or original file name, used to shape the response
    label: str | None = None

    @property
    def content_type(self) -> str:
        return self.output_format.content_type


@dataclass(frozen=True)
class TransformJob:
    source: SourceImage
    spec: TransformSpec


@dataclass(frozen=True)
class Artifact:
    file_name: str
    data: bytes = field(repr=False)
    content_type: str
    width: int
    height: int
    label: str | None = None
    sign_url: bool = False

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class PublishedResult:
    file_name: str
    signed_url: str | None = None
    label: str | None = None
