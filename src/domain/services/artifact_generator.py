from __future__ import annotations

import logging
from typing import Any

from src.domain.entities.image import Artifact, SourceImage, TransformJob, TransformSpec
from src.domain.exceptions import ImageToolsError, ProcessingError
from src.domain.services.codec import ImageCodec

logger = logging.getLogger(__name__)


class ArtifactGenerator:
    """Applies one TransformSpec to one source and encodes the result.

    ``base`` is the shared decoded source. It is only ever read: each
    operation hands back a new image, so sibling generations running at the
    same time against the same base never see each other's work.
    """

    def __init__(self, codec: ImageCodec) -> None:
        self.codec = codec

    def decode(self, source: SourceImage) -> Any:
        try:
            return self.codec.decode(source)
        except Exception as exc:
            raise ProcessingError(f"Could not decode {source.filename or 'image'}: {exc}") from exc

    def generate(self, job: TransformJob, base: Any | None = None) -> Artifact:
        spec = job.spec
        try:
            image = base if base is not None else self.codec.decode(job.source)
            for operation in spec.operations:
                image = self.codec.apply(image, operation)
            data = self.codec.encode(image, spec.output_format, spec.quality)
            width, height = self.codec.dimensions(image)
        except ImageToolsError:
            raise
        except Exception as exc:
            raise ProcessingError(f"Failed to generate {spec.file_name}: {exc}") from exc

        logger.debug("Generated %s (%dx%d, %d bytes)", spec.file_name, width, height, len(data))
        return _artifact(spec, data, width, height)


def _artifact(spec: TransformSpec, data: bytes, width: int, height: int) -> Artifact:
    return Artifact(
        file_name=spec.file_name,
        data=data,
        content_type=spec.content_type,
        width=width,
        height=height,
        label=spec.label,
        sign_url=spec.sign_url,
    )
