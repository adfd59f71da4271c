from __future__ import annotations

import io

import pytest
from PIL import Image

from src.domain.entities.image import ExtendOp, Fit, ResizeOp, SourceImage, TransformJob, TransformSpec
from src.domain.entities.tool import OutputFormat
from src.domain.exceptions import ProcessingError
from src.domain.services.artifact_generator import ArtifactGenerator
from src.infrastructure.imaging.pillow_codec import PillowCodec


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def _job(source, *ops, fmt=OutputFormat.PNG, quality=None, label=None):
    spec = TransformSpec(
        file_name=f"out.{fmt.value}", output_format=fmt, operations=ops, quality=quality, label=label
    )
    return TransformJob(source, spec)


@pytest.fixture()
def generator() -> ArtifactGenerator:
    return ArtifactGenerator(PillowCodec())


@pytest.fixture()
def wide(make_image) -> SourceImage:
    return SourceImage(data=make_image(200, 100), filename="wide.png")


@pytest.mark.parametrize("size", [(30, 40), (200, 100), (1, 1), (300, 20)])
def test_cover_resize_hits_exact_dimensions(generator, wide, size):
    artifact = generator.generate(_job(wide, ResizeOp(*size, Fit.COVER)))
    assert _open(artifact.data).size == size
    assert (artifact.width, artifact.height) == size


@pytest.mark.parametrize(
    "box, expected",
    [((50, 50), (50, 25)), ((400, 400), (400, 200)), ((10, 100), (10, 5))],
)
def test_contain_resize_fits_inside_box(generator, wide, box, expected):
    artifact = generator.generate(_job(wide, ResizeOp(*box, Fit.CONTAIN)))
    w, h = _open(artifact.data).size
    assert (w, h) == expected
    assert w <= box[0] and h <= box[1]


@pytest.mark.parametrize("size, expected", [((2000, 10), (16, 1)), ((10, 2000), (1, 16))])
def test_contain_resize_of_elongated_source_keeps_one_pixel(generator, make_image, size, expected):
    source = SourceImage(data=make_image(*size), filename="strip.png")
    artifact = generator.generate(_job(source, ResizeOp(16, 16, Fit.CONTAIN)))
    assert _open(artifact.data).size == expected
    assert (artifact.width, artifact.height) == expected


def test_zero_extend_keeps_size(generator, make_image):
    src = SourceImage(data=make_image(80, 80, mode="RGBA", color=(0, 0, 0, 0)))
    artifact = generator.generate(_job(src, ResizeOp(32, 32), ExtendOp(0, 0, 0, 0, "#ff0000")))
    assert _open(artifact.data).size == (32, 32)
    assert artifact.content_type == "image/png"


def test_encodes_requested_formats(generator, wide):
    for fmt, pil_name in [
        (OutputFormat.PNG, "PNG"),
        (OutputFormat.JPEG, "JPEG"),
        (OutputFormat.WEBP, "WEBP"),
        (OutputFormat.ICO, "ICO"),
    ]:
        artifact = generator.generate(_job(wide, ResizeOp(32, 32), fmt=fmt))
        assert _open(artifact.data).format == pil_name
        assert artifact.content_type == fmt.content_type


def test_jpeg_from_transparent_source(generator, make_image):
    src = SourceImage(data=make_image(10, 10, mode="RGBA", color=(1, 2, 3, 100)))
    artifact = generator.generate(_job(src, fmt=OutputFormat.JPEG))
    assert _open(artifact.data).mode == "RGB"


def test_palette_source_is_handled(generator, make_image):
    src = SourceImage(data=make_image(16, 16, fmt="GIF", mode="P", color=3))
    artifact = generator.generate(_job(src, ResizeOp(8, 8), fmt=OutputFormat.WEBP))
    assert _open(artifact.data).size == (8, 8)


def test_ico_frame_is_capped(generator, make_image):
    src = SourceImage(data=make_image(600, 600))
    artifact = generator.generate(_job(src, ResizeOp(512, 512), fmt=OutputFormat.ICO))
    assert _open(artifact.data).size == (256, 256)


def test_lower_quality_gives_smaller_webp(generator, make_image):
    # noisy image so quality actually matters
    img = Image.effect_noise((128, 128), 80).convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    src = SourceImage(data=buf.getvalue())
    low = generator.generate(_job(src, fmt=OutputFormat.WEBP, quality=5))
    high = generator.generate(_job(src, fmt=OutputFormat.WEBP, quality=95))
    assert low.size < high.size


def test_shared_base_is_never_mutated(generator, wide):
    base = generator.decode(wide)
    before = base.tobytes()
    for size in (16, 32, 48):
        generator.generate(_job(wide, ResizeOp(size, size), ExtendOp(0, 0, 0, 0, "#000")), base)
    assert base.size == (200, 100)
    assert base.tobytes() == before


def test_artifact_carries_spec_metadata(generator, wide):
    spec = TransformSpec(
        file_name="resized-1.webp",
        output_format=OutputFormat.WEBP,
        operations=(ResizeOp(10, 10),),
        sign_url=True,
        label="x",
    )
    artifact = generator.generate(TransformJob(wide, spec))
    assert artifact.file_name == "resized-1.webp"
    assert artifact.sign_url is True
    assert artifact.label == "x"


def test_undecodable_source_is_processing_error(generator):
    bad = SourceImage(data=b"not an image", filename="bad.png")
    with pytest.raises(ProcessingError):
        generator.decode(bad)
    with pytest.raises(ProcessingError):
        generator.generate(_job(bad, ResizeOp(10, 10)))


def test_render_canvas_with_text():
    codec = PillowCodec()
    data = codec.render_canvas(256, "#ffffff", text="A", text_color="#000000", font_size=128)
    img = _open(data).convert("RGB")
    assert img.size == (256, 256)
    assert img.getpixel((0, 0)) == (255, 255, 255)
    # some dark pixels were drawn for the glyph
    assert min(img.convert("L").getdata()) < 128


def test_render_canvas_without_text_is_flat():
    data = PillowCodec().render_canvas(256, "#336699")
    img = _open(data).convert("RGB")
    assert img.getcolors() == [(256 * 256, (0x33, 0x66, 0x99))]
