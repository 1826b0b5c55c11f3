"""Repository backends --- resolve ecosystem locators to local paths.

Every backend implements the ``RepositoryBackend`` abstract base class,
which exposes a single capability: ``resolve(identifier)`` turns an
ecosystem-specific locator (e.g. ``group:artifact:version``) into the path
of the artifact inside a local repository root.

Only the Maven layout is implemented. Other ecosystems are declared by
name in ``DECLARED_KINDS`` so that selecting one fails loudly with
``UnsupportedRepositoryError`` instead of silently resolving a wrong path.

The ``BackendRegistry`` follows the same registry pattern as a plugin
table: ``default_backends()`` pre-registers the built-in factories and
``register()`` accepts further ones.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

from trustchain.exceptions import InvalidArtifactIdError, UnsupportedRepositoryError

logger = logging.getLogger(__name__)

# Ecosystems known by name but without a resolution algorithm.
DECLARED_KINDS: tuple[str, ...] = ("npm", "cargo")


class RepositoryBackend(ABC):
    """Abstract base class for repository layouts.

    Attributes:
        root: Root directory of the local repository.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @property
    @abstractmethod
    def kind(self) -> str:
        """Short ecosystem name (e.g. 'maven')."""

    @abstractmethod
    def resolve(self, identifier: str) -> Path:
        """Resolve an artifact locator to a path under ``root``.

        Raises:
            InvalidArtifactIdError: If ``identifier`` is malformed.
        """


class MavenRepository(RepositoryBackend):
    """Standard local Maven repository layout (``~/.m2/repository``).

    ``com.example:mylib:1.2.3`` resolves to
    ``<root>/com/example/mylib/1.2.3/mylib-1.2.3.jar``.
    """

    _ID_RE = re.compile(r"^([^:]+):([^:]+):([^:]+)$")

    @property
    def kind(self) -> str:
        return "maven"

    def resolve(self, identifier: str) -> Path:
        match = self._ID_RE.match(identifier)
        if match is None:
            raise InvalidArtifactIdError(
                f"'{identifier}' is not a valid Maven artifact identifier "
                "(expected group:artifact:version)",
                subject=identifier,
            )
        group_id, artifact_id, version = match.groups()

        group_segments = [seg for seg in group_id.split(".") if seg]
        if not group_segments:
            raise InvalidArtifactIdError(
                f"'{identifier}' has an empty group id", subject=identifier
            )
        for segment in (*group_segments, artifact_id, version):
            _check_segment(segment, identifier)

        path = self.root.joinpath(*group_segments, artifact_id, version,
                                  f"{artifact_id}-{version}.jar")
        logger.debug("resolved %s to %s", identifier, path)
        return path


def _check_segment(segment: str, identifier: str) -> None:
    """Reject segments that would escape the repository root."""
    if segment in (".", "..") or "/" in segment or "\\" in segment:
        raise InvalidArtifactIdError(
            f"'{identifier}' contains an illegal path segment '{segment}'",
            subject=identifier,
        )


BackendFactory = Callable[[Path], RepositoryBackend]


class BackendRegistry:
    """Registry of repository backend factories keyed by ecosystem name."""

    def __init__(self) -> None:
        self._factories: dict[str, BackendFactory] = {}

    def register(self, kind: str, factory: BackendFactory) -> None:
        """Register ``factory`` for ``kind``, replacing any previous one."""
        self._factories[kind.lower()] = factory

    @property
    def kinds(self) -> list[str]:
        """Sorted names of the implemented backends."""
        return sorted(self._factories)

    def create(self, kind: str, root: Path) -> RepositoryBackend:
        """Instantiate the backend for ``kind`` rooted at ``root``.

        Raises:
            UnsupportedRepositoryError: If ``kind`` is declared but not
                implemented, or not known at all.
        """
        key = kind.lower()
        factory = self._factories.get(key)
        if factory is not None:
            return factory(Path(root))
        if key in DECLARED_KINDS:
            raise UnsupportedRepositoryError(
                f"repository kind '{kind}' is not implemented yet",
                subject=kind,
            )
        raise UnsupportedRepositoryError(
            f"unknown repository kind '{kind}' "
            f"(supported: {', '.join(self.kinds)})",
            subject=kind,
        )


def default_backends() -> BackendRegistry:
    """Create a BackendRegistry with all built-in backends registered."""
    registry = BackendRegistry()
    registry.register("maven", MavenRepository)
    return registry
