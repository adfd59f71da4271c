from __future__ import annotations

import logging
import math
import time
from typing import Callable

from src.domain.entities.image import (
    ExtendOp,
    Fit,
    ResizeOp,
    SourceImage,
    TransformJob,
    TransformSpec,
)
from src.domain.entities.requests import (
    BulkResizeRequest,
    CompressRequest,
    ConvertRequest,
    FaviconRequest,
    IconConvertRequest,
    IconEditRequest,
    ResizeRequest,
    ResizeType,
    TransformRequest,
)
from src.domain.entities.tool import (
    CONVERTIBLE_FORMATS,
    ICO_LABEL,
    OutputFormat,
    ToolProfile,
    profile_for,
)
from src.domain.exceptions import InvalidRequestError, ResolutionError
from src.domain.services.codec import ImageCodec

logger = logging.getLogger(__name__)


def epoch_millis() -> int:
    return int(time.time() * 1000)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_file_name(
    prefix: str,
    timestamp: int,
    ext: str,
    *,
    original_name: str | None = None,
    size: int | None = None,
) -> str:
    """``<prefix>-<timestamp>[-<original-name>][-<size>].<ext>``"""
    parts = [prefix, str(timestamp)]
    if original_name:
        # keys are flat: no directory components from client file names
        parts.append(original_name.replace("/", "_").replace("\\", "_"))
    if size is not None:
        parts.append(str(size))
    return f"{'-'.join(parts)}.{ext}"


class TransformSpecResolver:
    """Turns a tool request into the ordered list of jobs that fulfil it.

    The order of the returned jobs is the order results are reported back to
    the caller: listed size order, or input file order for bulk requests.
    """

    def __init__(
        self,
        codec: ImageCodec,
        clock: Callable[[], int] = epoch_millis,
        max_dimension: int | None = None,
    ) -> None:
        self.codec = codec
        self.clock = clock
        self.max_dimension = max_dimension

    def resolve(self, request: TransformRequest) -> list[TransformJob]:
        profile = profile_for(request.tool)
        timestamp = self.clock()

        if isinstance(request, ResizeRequest):
            jobs = [self._resize(request, profile, timestamp)]
        elif isinstance(request, BulkResizeRequest):
            jobs = self._bulk_resize(request, profile, timestamp)
        elif isinstance(request, CompressRequest):
            jobs = [self._compress(request, profile, timestamp)]
        elif isinstance(request, ConvertRequest):
            jobs = [self._convert(request, profile, timestamp)]
        elif isinstance(request, IconConvertRequest):
            jobs = self._icon_convert(request, profile, timestamp)
        elif isinstance(request, IconEditRequest):
            jobs = [self._icon_edit(request, profile, timestamp)]
        elif isinstance(request, FaviconRequest):
            jobs = self._favicon(request, profile, timestamp)
        else:
            raise ResolutionError(f"Unsupported request type: {type(request).__name__}")

        logger.debug("Resolved %s into %d job(s)", request.tool.value, len(jobs))
        return jobs

    # --------- per-tool rules ---------
    def _resize(self, req: ResizeRequest, profile: ToolProfile, ts: int) -> TransformJob:
        if req.resize_type is ResizeType.PERCENTAGE:
            intrinsic_w, intrinsic_h = self.codec.probe_size(req.source)
            width = round_half_up(intrinsic_w * req.width / 100)
            height = round_half_up(intrinsic_h * req.height / 100)
            if width <= 0 or height <= 0:
                raise ResolutionError(
                    f"Percentage resize of {intrinsic_w}x{intrinsic_h} yields an empty image"
                )
            if self.max_dimension is not None and max(width, height) > self.max_dimension:
                raise InvalidRequestError(
                    f"Percentage resize to {width}x{height} exceeds the {self.max_dimension} pixel limit"
                )
            op = ResizeOp(width, height, Fit.COVER)
        elif req.resize_type is ResizeType.RATIO:
            op = ResizeOp(req.width, req.height, Fit.CONTAIN)
        else:
            op = ResizeOp(req.width, req.height, Fit.COVER)

        fmt = profile.output_formats[0]
        spec = TransformSpec(
            file_name=build_file_name(profile.prefix, ts, fmt.extension),
            output_format=fmt,
            operations=(op,),
            sign_url=profile.signs_urls,
        )
        return TransformJob(req.source, spec)

    def _bulk_resize(self, req: BulkResizeRequest, profile: ToolProfile, ts: int) -> list[TransformJob]:
        fmt = profile.output_formats[0]
        op = ResizeOp(req.width, req.height, Fit.CONTAIN)
        jobs = []
        used: set[str] = set()
        for source in req.sources:
            name = source.filename or "image"
            file_name = build_file_name(profile.prefix, ts, fmt.extension, original_name=name)
            # repeated client names within one request get an occurrence suffix
            occurrence = 1
            while file_name in used:
                occurrence += 1
                file_name = build_file_name(
                    profile.prefix, ts, fmt.extension, original_name=f"{name}-{occurrence}"
                )
            used.add(file_name)
            spec = TransformSpec(
                file_name=file_name,
                output_format=fmt,
                operations=(op,),
                sign_url=profile.signs_urls,
                label=name,
            )
            jobs.append(TransformJob(source, spec))
        return jobs

    def _compress(self, req: CompressRequest, profile: ToolProfile, ts: int) -> TransformJob:
        fmt = profile.output_formats[0]
        spec = TransformSpec(
            file_name=build_file_name(profile.prefix, ts, fmt.extension),
            output_format=fmt,
            quality=req.quality,
        )
        return TransformJob(req.source, spec)

    def _convert(self, req: ConvertRequest, profile: ToolProfile, ts: int) -> TransformJob:
        try:
            fmt = OutputFormat(req.target_format.lower())
        except ValueError:
            fmt = None
        if fmt not in CONVERTIBLE_FORMATS:
            raise ResolutionError(f"Unsupported format: {req.target_format}")
        spec = TransformSpec(
            file_name=build_file_name(profile.prefix, ts, fmt.extension),
            output_format=fmt,
        )
        return TransformJob(req.source, spec)

    def _icon_convert(self, req: IconConvertRequest, profile: ToolProfile, ts: int) -> list[TransformJob]:
        if not req.sizes:
            raise InvalidRequestError("At least one icon size is required")
        if len(set(req.sizes)) != len(req.sizes):
            raise InvalidRequestError("Icon sizes must not repeat")
        return self._icon_set(req.source, profile, ts, req.sizes, ico_size=req.sizes[0])

    def _icon_edit(self, req: IconEditRequest, profile: ToolProfile, ts: int) -> TransformJob:
        self._check_color(req.background_color)
        # Margins are all zero: the extend step keeps the canvas at size x size.
        ops = (
            ResizeOp(req.size, req.size),
            ExtendOp(0, 0, 0, 0, req.background_color),
        )
        spec = TransformSpec(
            file_name=build_file_name(profile.prefix, ts, OutputFormat.PNG.extension),
            output_format=OutputFormat.PNG,
            operations=ops,
        )
        return TransformJob(req.source, spec)

    def _favicon(self, req: FaviconRequest, profile: ToolProfile, ts: int) -> list[TransformJob]:
        if req.source is not None:
            base = req.source
        elif req.text:
            base = self._favicon_canvas(req, profile)
        else:
            raise InvalidRequestError("Either a file or text is required")
        return self._icon_set(base, profile, ts, profile.fixed_sizes, ico_size=profile.ico_size)

    def _favicon_canvas(self, req: FaviconRequest, profile: ToolProfile) -> SourceImage:
        if not req.background_color:
            raise InvalidRequestError("Background color is required when no file is given")
        self._check_color(req.background_color)
        if req.text_color:
            self._check_color(req.text_color)
        data = self.codec.render_canvas(
            profile.canvas_size,
            req.background_color,
            text=req.text,
            text_color=req.text_color,
            font_size=profile.font_size,
        )
        return SourceImage(data=data, filename="favicon-canvas.png", content_type="image/png")

    # --------- helpers ---------
    @staticmethod
    def _icon_set(
        source: SourceImage,
        profile: ToolProfile,
        ts: int,
        sizes: tuple[int, ...],
        *,
        ico_size: int,
    ) -> list[TransformJob]:
        """One PNG per size followed by the single icon-container job."""
        jobs = []
        for size in sizes:
            spec = TransformSpec(
                file_name=build_file_name(profile.prefix, ts, OutputFormat.PNG.extension, size=size),
                output_format=OutputFormat.PNG,
                operations=(ResizeOp(size, size),),
                label=str(size),
            )
            jobs.append(TransformJob(source, spec))
        ico = TransformSpec(
            file_name=build_file_name(profile.prefix, ts, OutputFormat.ICO.extension),
            output_format=OutputFormat.ICO,
            operations=(ResizeOp(ico_size, ico_size),),
            label=ICO_LABEL,
        )
        jobs.append(TransformJob(source, ico))
        return jobs

    def _check_color(self, color: str) -> None:
        try:
            self.codec.validate_color(color)
        except ValueError as exc:
            raise ResolutionError(f"Invalid color: {color!r}") from exc


