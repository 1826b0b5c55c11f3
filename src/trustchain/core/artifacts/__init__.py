"""Content-addressable artifact identity.

Submodules:
    models    -- ArtifactId (256-bit content digest)
    hasher    -- hash_file, hash_folder, hash_path
    backends  -- RepositoryBackend, MavenRepository, BackendRegistry
    identity  -- ArtifactIdentity (backend + hasher)
"""

from trustchain.core.artifacts.backends import (
    DECLARED_KINDS,
    BackendRegistry,
    MavenRepository,
    RepositoryBackend,
    default_backends,
)
from trustchain.core.artifacts.hasher import hash_file, hash_folder, hash_path
from trustchain.core.artifacts.identity import ArtifactIdentity
from trustchain.core.artifacts.models import ArtifactId

__all__ = [
    "DECLARED_KINDS",
    "ArtifactId",
    "ArtifactIdentity",
    "BackendRegistry",
    "MavenRepository",
    "RepositoryBackend",
    "default_backends",
    "hash_file",
    "hash_folder",
    "hash_path",
]
