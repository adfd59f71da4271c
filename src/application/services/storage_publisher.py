from __future__ import annotations

import logging
from dataclasses import dataclass

from src.domain.entities.image import Artifact, PublishedResult
from src.domain.entities.tool import SIGNED_URL_TTL_SECONDS
from src.domain.exceptions import StorageError
from src.infrastructure.storage.supabase_storage import SupabaseStorage

logger = logging.getLogger(__name__)


@dataclass
class StoragePublisher:
    """Persists an artifact under its file name and optionally signs a URL.

    Publishing is one-shot: a failed upload or signing call is raised as
    StorageError and never retried.
    """

    storage: SupabaseStorage
    url_ttl: int = SIGNED_URL_TTL_SECONDS

    def publish(self, artifact: Artifact) -> PublishedResult:
        try:
            stored = self.storage.upload_bytes(
                artifact.file_name, artifact.data, artifact.content_type
            )
        except Exception as exc:
            raise StorageError(f"Upload of {artifact.file_name} failed: {exc}") from exc

        signed_url = None
        if artifact.sign_url:
            try:
                signed_url = self.storage.create_signed_url(stored.path, self.url_ttl)
            except Exception as exc:
                raise StorageError(f"Signing {stored.path} failed: {exc}") from exc

        logger.info("Published %s (%s, %d bytes)", stored.path, stored.content_type, stored.size)
        return PublishedResult(file_name=stored.path, signed_url=signed_url, label=artifact.label)
