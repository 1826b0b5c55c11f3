"""Artifact identity: locator -> path -> content digest."""

from __future__ import annotations

import logging

from trustchain.core.artifacts.backends import RepositoryBackend
from trustchain.core.artifacts.hasher import hash_path
from trustchain.core.artifacts.models import ArtifactId

logger = logging.getLogger(__name__)


class ArtifactIdentity:
    """Computes ``ArtifactId`` values for repository locators on demand.

    Nothing is cached: every call re-hashes the artifact, so the identity
    always reflects the bytes present at call time.
    """

    def __init__(self, backend: RepositoryBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> RepositoryBackend:
        return self._backend

    def compute(self, identifier: str) -> ArtifactId:
        """Resolve ``identifier`` and hash the artifact found there.

        Raises:
            InvalidArtifactIdError: If the backend rejects the identifier.
            ArtifactNotFoundError: If nothing exists at the resolved path.
            ArtifactReadError: If the artifact cannot be read.
        """
        path = self._backend.resolve(identifier)
        logger.debug("calculating hash for %s at %s", identifier, path)
        return hash_path(path)
