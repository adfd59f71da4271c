from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.concurrency import run_in_threadpool

from src.application.services.batch_orchestrator import BatchOrchestrator
from src.domain.entities.image import PublishedResult
from src.domain.entities.requests import TransformRequest
from src.domain.entities.tool import ICO_LABEL
from src.domain.services.transform_resolver import TransformSpecResolver

logger = logging.getLogger(__name__)


@dataclass
class RunToolUseCase:
    """Resolve a tool request, then generate and publish every artifact."""

    resolver: TransformSpecResolver
    orchestrator: BatchOrchestrator

    async def execute(self, request: TransformRequest) -> list[PublishedResult]:
        # resolution may probe the source or render a canvas, both blocking
        jobs = await run_in_threadpool(self.resolver.resolve, request)
        results = await self.orchestrator.run(jobs)
        logger.info("%s produced %d artifact(s)", request.tool.value, len(results))
        return results


def split_icon_results(results: list[PublishedResult]) -> tuple[PublishedResult, list[PublishedResult]]:
    """Separate the icon-container result from the per-size PNG results."""
    ico = [r for r in results if r.label == ICO_LABEL]
    pngs = [r for r in results if r.label != ICO_LABEL]
    if len(ico) != 1:
        raise ValueError(f"Expected exactly one icon result, got {len(ico)}")
    return ico[0], pngs
