"""
Tests for turning tool requests into transform jobs.
"""
from __future__ import annotations

import pytest

from src.domain.entities.image import ExtendOp, Fit, ResizeOp, SourceImage
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
from src.domain.entities.tool import OutputFormat
from src.domain.exceptions import InvalidRequestError, ResolutionError
from src.domain.services.transform_resolver import (
    TransformSpecResolver,
    build_file_name,
    round_half_up,
)
from src.infrastructure.imaging.pillow_codec import PillowCodec

TS = 1700000000000


@pytest.fixture()
def resolver() -> TransformSpecResolver:
    return TransformSpecResolver(PillowCodec(), clock=lambda: TS)


@pytest.fixture()
def source(make_image) -> SourceImage:
    return SourceImage(data=make_image(200, 100), filename="photo.png", content_type="image/png")


def test_build_file_name_variants():
    assert build_file_name("resized", TS, "webp") == f"resized-{TS}.webp"
    assert build_file_name("icon", TS, "png", size=16) == f"icon-{TS}-16.png"
    assert (
        build_file_name("bulk-resized", TS, "webp", original_name="a.jpg")
        == f"bulk-resized-{TS}-a.jpg.webp"
    )


def test_build_file_name_flattens_directories():
    assert build_file_name("bulk-resized", TS, "webp", original_name="../x/y.png") == (
        f"bulk-resized-{TS}-.._x_y.png.webp"
    )


def test_round_half_up():
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


class TestResize:
    def test_pixels_is_exact_cover(self, resolver, source):
        (job,) = resolver.resolve(ResizeRequest(source, 30, 40, ResizeType.PIXELS))
        assert job.spec.operations == (ResizeOp(30, 40, Fit.COVER),)
        assert job.spec.output_format is OutputFormat.WEBP
        assert job.spec.file_name == f"resized-{TS}.webp"
        assert job.spec.sign_url is True

    def test_percentage_reads_intrinsic_size(self, resolver, source):
        (job,) = resolver.resolve(ResizeRequest(source, 50, 25, ResizeType.PERCENTAGE))
        assert job.spec.operations == (ResizeOp(100, 25, Fit.COVER),)

    def test_percentage_rounds_half_up(self, resolver, make_image):
        src = SourceImage(data=make_image(3, 5))
        (job,) = resolver.resolve(ResizeRequest(src, 50, 50, ResizeType.PERCENTAGE))
        assert job.spec.operations == (ResizeOp(2, 3, Fit.COVER),)

    def test_percentage_to_nothing_is_resolution_error(self, resolver, make_image):
        src = SourceImage(data=make_image(2, 2))
        with pytest.raises(ResolutionError):
            resolver.resolve(ResizeRequest(src, 1, 1, ResizeType.PERCENTAGE))

    def test_percentage_over_dimension_limit_is_invalid(self, make_image):
        resolver = TransformSpecResolver(PillowCodec(), clock=lambda: TS, max_dimension=1000)
        src = SourceImage(data=make_image(200, 100))
        with pytest.raises(InvalidRequestError, match="1000 pixel limit"):
            resolver.resolve(ResizeRequest(src, 600, 100, ResizeType.PERCENTAGE))
        (job,) = resolver.resolve(ResizeRequest(src, 500, 100, ResizeType.PERCENTAGE))
        assert job.spec.operations == (ResizeOp(1000, 100, Fit.COVER),)

    def test_ratio_uses_contain(self, resolver, source):
        (job,) = resolver.resolve(ResizeRequest(source, 50, 50, ResizeType.RATIO))
        assert job.spec.operations == (ResizeOp(50, 50, Fit.CONTAIN),)


def test_bulk_resize_one_job_per_file_in_order(resolver, make_image):
    sources = tuple(SourceImage(data=make_image(), filename=name) for name in ("b.png", "a.png", "c.png"))
    jobs = resolver.resolve(BulkResizeRequest(sources, 64, 64))
    assert [j.spec.label for j in jobs] == ["b.png", "a.png", "c.png"]
    assert [j.source for j in jobs] == list(sources)
    assert all(j.spec.operations == (ResizeOp(64, 64, Fit.CONTAIN),) for j in jobs)
    assert all(j.spec.output_format is OutputFormat.WEBP for j in jobs)
    assert jobs[0].spec.file_name == f"bulk-resized-{TS}-b.png.webp"


def test_bulk_resize_repeated_names_get_distinct_keys(resolver, make_image):
    names = ("logo.png", "logo.png", "x.png", "logo.png")
    sources = tuple(SourceImage(data=make_image(), filename=name) for name in names)
    jobs = resolver.resolve(BulkResizeRequest(sources, 40, 40))
    assert [j.spec.file_name for j in jobs] == [
        f"bulk-resized-{TS}-logo.png.webp",
        f"bulk-resized-{TS}-logo.png-2.webp",
        f"bulk-resized-{TS}-x.png.webp",
        f"bulk-resized-{TS}-logo.png-3.webp",
    ]
    assert [j.spec.label for j in jobs] == list(names)


def test_compress_keeps_size_and_sets_quality(resolver, source):
    (job,) = resolver.resolve(CompressRequest(source, 42))
    assert job.spec.operations == ()
    assert job.spec.quality == 42
    assert job.spec.output_format is OutputFormat.WEBP
    assert job.spec.sign_url is False
    assert job.spec.file_name == f"compressed-{TS}.webp"


@pytest.mark.parametrize("fmt", ["png", "jpeg", "webp"])
def test_convert_supported_formats(resolver, source, fmt):
    (job,) = resolver.resolve(ConvertRequest(source, fmt))
    assert job.spec.output_format is OutputFormat(fmt)
    assert job.spec.file_name == f"converted-{TS}.{fmt}"
    assert job.spec.content_type == f"image/{fmt}"


@pytest.mark.parametrize("fmt", ["gif", "ico", "bmp", ""])
def test_convert_unsupported_format_is_resolution_error(resolver, source, fmt):
    with pytest.raises(ResolutionError, match="Unsupported format"):
        resolver.resolve(ConvertRequest(source, fmt))


def test_icon_convert_one_png_per_size_plus_ico(resolver, source):
    jobs = resolver.resolve(IconConvertRequest(source, (48, 16, 32)))
    assert len(jobs) == 4
    pngs, ico = jobs[:3], jobs[3]
    assert [j.spec.label for j in pngs] == ["48", "16", "32"]
    assert [j.spec.file_name for j in pngs] == [f"icon-{TS}-{s}.png" for s in (48, 16, 32)]
    assert ico.spec.output_format is OutputFormat.ICO
    assert ico.spec.operations == (ResizeOp(48, 48),)
    assert ico.spec.file_name == f"icon-{TS}.ico"
    assert ico.spec.content_type == "image/x-icon"


def test_icon_convert_without_sizes_is_invalid(resolver, source):
    with pytest.raises(InvalidRequestError):
        resolver.resolve(IconConvertRequest(source, ()))


def test_icon_convert_repeated_size_is_invalid(resolver, source):
    with pytest.raises(InvalidRequestError, match="repeat"):
        resolver.resolve(IconConvertRequest(source, (16, 32, 16)))


def test_icon_edit_resizes_then_zero_extends(resolver, source):
    (job,) = resolver.resolve(IconEditRequest(source, 64, "#ff0000"))
    assert job.spec.operations == (ResizeOp(64, 64), ExtendOp(0, 0, 0, 0, "#ff0000"))
    assert job.spec.output_format is OutputFormat.PNG
    assert job.spec.file_name == f"icon-{TS}.png"


def test_icon_edit_bad_color_is_resolution_error(resolver, source):
    with pytest.raises(ResolutionError):
        resolver.resolve(IconEditRequest(source, 64, "not-a-color"))


class TestFavicon:
    def test_from_file_uses_file_as_base(self, resolver, source):
        jobs = resolver.resolve(FaviconRequest(source=source))
        assert len(jobs) == 7
        assert all(j.source is source for j in jobs)
        assert [j.spec.label for j in jobs[:6]] == ["16", "32", "48", "64", "128", "256"]
        assert jobs[6].spec.operations == (ResizeOp(32, 32),)
        assert jobs[6].spec.file_name == f"favicon-{TS}.ico"

    def test_from_text_builds_256_canvas(self, resolver):
        jobs = resolver.resolve(
            FaviconRequest(text="A", background_color="#ffffff", text_color="#000000")
        )
        assert len(jobs) == 7
        base = jobs[0].source
        assert all(j.source is base for j in jobs)
        assert PillowCodec().probe_size(base) == (256, 256)

    def test_needs_file_or_text(self, resolver):
        with pytest.raises(InvalidRequestError):
            resolver.resolve(FaviconRequest(background_color="#ffffff"))

    def test_bad_background_is_resolution_error(self, resolver):
        with pytest.raises(ResolutionError):
            resolver.resolve(FaviconRequest(text="A", background_color="nope", text_color="#000"))
