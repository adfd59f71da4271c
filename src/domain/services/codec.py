from __future__ import annotations

from typing import Any, Protocol

from src.domain.entities.image import Operation, SourceImage
from src.domain.entities.tool import OutputFormat


class ImageCodec(Protocol):
    """Decode/transform/encode capability the pipeline drives.

    Decoded images are opaque to the domain layer. ``apply`` must return a new
    image and leave its input untouched.
    """

    def probe_size(self, source: SourceImage) -> tuple[int, int]: ...

    def decode(self, source: SourceImage) -> Any: ...

    def apply(self, image: Any, operation: Operation) -> Any: ...

    def encode(self, image: Any, fmt: OutputFormat, quality: int | None = None) -> bytes: ...

    def dimensions(self, image: Any) -> tuple[int, int]: ...

    def validate_color(self, color: str) -> None: ...

    def render_canvas(
        self,
        size: int,
        background: str,
        text: str | None = None,
        text_color: str | None = None,
        font_size: int | None = None,
    ) -> bytes: ...
