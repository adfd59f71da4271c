from __future__ import annotations

import os
from io import BytesIO

from PIL import Image, ImageColor, ImageDraw, ImageFont, ImageOps

from src.domain.entities.image import ExtendOp, Fit, Operation, ResizeOp, SourceImage
from src.domain.entities.tool import ICO_MAX_SIZE, OutputFormat

# Encoder defaults when no quality is requested.
DEFAULT_QUALITY = {OutputFormat.JPEG: 80, OutputFormat.WEBP: 80}

_FONT_CANDIDATES = ("DejaVuSans-Bold.ttf", "DejaVuSans.ttf", "Arial.ttf", "arial.ttf")

_RESAMPLE = Image.Resampling.LANCZOS


def _contain_size(size: tuple[int, int], box: tuple[int, int]) -> tuple[int, int]:
    """Largest size inside ``box`` with the aspect ratio of ``size``, at least 1x1."""
    width, height = size
    box_w, box_h = box
    scale = min(box_w / width, box_h / height)
    return (
        max(1, min(box_w, round(width * scale))),
        max(1, min(box_h, round(height * scale))),
    )


class PillowCodec:
    """Pillow-backed codec. Every transform returns a fresh image."""

    def __init__(self, font_path: str | None = None) -> None:
        self.font_path = font_path or os.getenv("FAVICON_FONT_PATH")

    def probe_size(self, source: SourceImage) -> tuple[int, int]:
        # Only the header is parsed here; pixel data is not decoded.
        with Image.open(BytesIO(source.data)) as img:
            return img.size

    def decode(self, source: SourceImage) -> Image.Image:
        img = Image.open(BytesIO(source.data))
        img.load()
        if img.mode not in ("RGB", "RGBA", "L", "LA"):
            img = img.convert("RGBA" if img.has_transparency_data else "RGB")
        return img

    def dimensions(self, image: Image.Image) -> tuple[int, int]:
        return image.size

    def apply(self, image: Image.Image, operation: Operation) -> Image.Image:
        if isinstance(operation, ResizeOp):
            return self._resize(image, operation)
        if isinstance(operation, ExtendOp):
            return self._extend(image, operation)
        raise ValueError(f"Unsupported operation: {operation!r}")

    def encode(self, image: Image.Image, fmt: OutputFormat, quality: int | None = None) -> bytes:
        buf = BytesIO()
        if fmt is OutputFormat.PNG:
            image.save(buf, format="PNG")
        elif fmt is OutputFormat.JPEG:
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            image.save(buf, format="JPEG", quality=quality or DEFAULT_QUALITY[fmt])
        elif fmt is OutputFormat.WEBP:
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA" if "A" in image.mode else "RGB")
            image.save(buf, format="WEBP", quality=quality or DEFAULT_QUALITY[fmt])
        elif fmt is OutputFormat.ICO:
            if image.mode != "RGBA":
                image = image.convert("RGBA")
            w, h = image.size
            frame = (min(w, ICO_MAX_SIZE), min(h, ICO_MAX_SIZE))
            image.save(buf, format="ICO", sizes=[frame])
        else:  # pragma: no cover - enum is exhaustive
            raise ValueError(f"Unsupported output format: {fmt}")
        return buf.getvalue()

    def validate_color(self, color: str) -> None:
        ImageColor.getrgb(color)

    def render_canvas(
        self,
        size: int,
        background: str,
        text: str | None = None,
        text_color: str | None = None,
        font_size: int | None = None,
    ) -> bytes:
        canvas = Image.new("RGBA", (size, size), background)
        if text:
            draw = ImageDraw.Draw(canvas)
            font = self._load_font(font_size or size // 2)
            left, top, right, bottom = draw.multiline_textbbox((0, 0), text, font=font, align="center")
            x = (size - (right - left)) / 2 - left
            y = (size - (bottom - top)) / 2 - top
            draw.multiline_text((x, y), text, fill=text_color or "#000000", font=font, align="center")
        buf = BytesIO()
        canvas.save(buf, format="PNG")
        return buf.getvalue()

    # --------- helpers ---------
    @staticmethod
    def _resize(image: Image.Image, op: ResizeOp) -> Image.Image:
        if op.fit is Fit.CONTAIN:
            return image.resize(_contain_size(image.size, (op.width, op.height)), _RESAMPLE)
        return ImageOps.fit(image, (op.width, op.height), method=_RESAMPLE)

    @staticmethod
    def _extend(image: Image.Image, op: ExtendOp) -> Image.Image:
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA")
        return ImageOps.expand(
            image, border=(op.left, op.top, op.right, op.bottom), fill=op.background
        )

    def _load_font(self, font_size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        candidates = (self.font_path,) if self.font_path else ()
        for name in candidates + _FONT_CANDIDATES:
            try:
                return ImageFont.truetype(name, font_size)
            except OSError:
                continue
        return ImageFont.load_default(size=font_size)
