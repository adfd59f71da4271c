from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from starlette.concurrency import run_in_threadpool

from src.application.services.storage_publisher import StoragePublisher
from src.domain.entities.image import PublishedResult, SourceImage, TransformJob
from src.domain.services.artifact_generator import ArtifactGenerator

logger = logging.getLogger(__name__)


@dataclass
class BatchOrchestrator:
    """Fans a resolved request out into concurrent generate -> publish chains.

    Semantics are all-or-nothing: results are returned in job order once every
    chain has finished, and the first failing chain fails the whole batch.
    Codec and storage calls block, so they are pushed to the threadpool while
    the request coroutine awaits them together.
    """

    generator: ArtifactGenerator
    publisher: StoragePublisher

    async def run(self, jobs: list[TransformJob]) -> list[PublishedResult]:
        if not jobs:
            return []
        bases = await self._decode_sources(jobs)
        logger.debug("Fanning out %d job(s) over %d source(s)", len(jobs), len(bases))
        results = await asyncio.gather(
            *(self._generate_and_publish(job, bases[id(job.source)]) for job in jobs)
        )
        return list(results)

    async def _decode_sources(self, jobs: list[TransformJob]) -> dict[int, Any]:
        # each distinct source is decoded once and shared read-only by its jobs
        sources: dict[int, SourceImage] = {}
        for job in jobs:
            sources.setdefault(id(job.source), job.source)
        decoded = await asyncio.gather(
            *(run_in_threadpool(self.generator.decode, src) for src in sources.values())
        )
        return dict(zip(sources.keys(), decoded))

    async def _generate_and_publish(self, job: TransformJob, base: Any) -> PublishedResult:
        artifact = await run_in_threadpool(self.generator.generate, job, base)
        return await run_in_threadpool(self.publisher.publish, artifact)
