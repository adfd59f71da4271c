from __future__ import annotations

from src.application.services.batch_orchestrator import BatchOrchestrator
from src.application.services.storage_publisher import StoragePublisher
from src.application.use_cases.run_tool import RunToolUseCase
from src.domain.services.artifact_generator import ArtifactGenerator
from src.domain.services.transform_resolver import TransformSpecResolver
from src.infrastructure.api.forms import max_dimension
from src.infrastructure.imaging.pillow_codec import PillowCodec
from src.infrastructure.storage.supabase_client import get_supabase_client
from src.infrastructure.storage.supabase_storage import SupabaseStorage


def get_codec() -> PillowCodec:
    return PillowCodec()


def get_storage() -> SupabaseStorage:
    client = get_supabase_client()
    return SupabaseStorage(client)


def get_run_tool_use_case() -> RunToolUseCase:
    codec = get_codec()
    orchestrator = BatchOrchestrator(
        generator=ArtifactGenerator(codec),
        publisher=StoragePublisher(get_storage()),
    )
    return RunToolUseCase(resolver=TransformSpecResolver(codec, max_dimension=max_dimension()), orchestrator=orchestrator)
