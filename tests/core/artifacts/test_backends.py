"""Tests for repository backends and artifact identity."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from trustchain.core.artifacts import (
    ArtifactIdentity,
    BackendRegistry,
    MavenRepository,
    RepositoryBackend,
    default_backends,
)
from trustchain.exceptions import (
    ArtifactNotFoundError,
    ErrorKind,
    InvalidArtifactIdError,
    UnsupportedRepositoryError,
)


class TestMavenRepository:
    """Tests for Maven locator resolution."""

    def test_resolves_standard_layout(self, tmp_path: Path) -> None:
        repo = MavenRepository(tmp_path)
        path = repo.resolve("com.example:mylib:1.2.3")
        assert path == tmp_path / "com" / "example" / "mylib" / "1.2.3" / "mylib-1.2.3.jar"

    def test_single_segment_group(self, tmp_path: Path) -> None:
        path = MavenRepository(tmp_path).resolve("junit:junit:4.13")
        assert path == tmp_path / "junit" / "junit" / "4.13" / "junit-4.13.jar"

    def test_kind(self, tmp_path: Path) -> None:
        assert MavenRepository(tmp_path).kind == "maven"

    @pytest.mark.parametrize("identifier", [
        "com.example:mylib",
        "com.example:mylib:1.0:extra",
        "",
        "::",
        "no-colons",
    ])
    def test_malformed_identifier(self, tmp_path: Path, identifier: str) -> None:
        with pytest.raises(InvalidArtifactIdError) as exc_info:
            MavenRepository(tmp_path).resolve(identifier)
        assert exc_info.value.kind is ErrorKind.INVALID_ARTIFACT_ID

    @pytest.mark.parametrize("identifier", [
        "..:mylib:1.0",
        "com.example:..:1.0",
        "com.example:mylib:..",
        "com.example:my/lib:1.0",
        "com.example:mylib:1.0\\x",
    ])
    def test_path_escapes_rejected(self, tmp_path: Path, identifier: str) -> None:
        with pytest.raises(InvalidArtifactIdError):
            MavenRepository(tmp_path).resolve(identifier)


class TestBackendRegistry:
    """Tests for backend selection."""

    def test_default_has_maven(self, tmp_path: Path) -> None:
        registry = default_backends()
        assert registry.kinds == ["maven"]
        assert isinstance(registry.create("maven", tmp_path), MavenRepository)

    def test_kind_is_case_insensitive(self, tmp_path: Path) -> None:
        assert isinstance(default_backends().create("MAVEN", tmp_path), MavenRepository)

    @pytest.mark.parametrize("kind", ["npm", "cargo"])
    def test_declared_kinds_unsupported(self, tmp_path: Path, kind: str) -> None:
        with pytest.raises(UnsupportedRepositoryError, match="not implemented"):
            default_backends().create(kind, tmp_path)

    def test_unknown_kind(self, tmp_path: Path) -> None:
        with pytest.raises(UnsupportedRepositoryError, match="unknown"):
            default_backends().create("gradle", tmp_path)

    def test_register_custom_backend(self, tmp_path: Path) -> None:
        class FlatRepository(RepositoryBackend):
            @property
            def kind(self) -> str:
                return "flat"

            def resolve(self, identifier: str) -> Path:
                return self.root / identifier

        registry = BackendRegistry()
        registry.register("flat", FlatRepository)
        backend = registry.create("flat", tmp_path)
        assert backend.resolve("x.bin") == tmp_path / "x.bin"


class TestArtifactIdentity:
    """Tests for locator -> digest computation."""

    def test_compute_hashes_resolved_jar(self, maven_repo: MavenRepository) -> None:
        identity = ArtifactIdentity(maven_repo)
        artifact_id = identity.compute("com.example:mylib:1.2.3")
        expected = hashlib.sha256(b"PK\x03\x04 fake jar content").digest()
        assert artifact_id.digest == expected

    def test_not_cached(self, maven_repo: MavenRepository) -> None:
        """A changed artifact yields a new digest on the next call."""
        identity = ArtifactIdentity(maven_repo)
        before = identity.compute("com.example:mylib:1.2.3")
        jar = maven_repo.resolve("com.example:mylib:1.2.3")
        jar.write_bytes(b"tampered")
        assert identity.compute("com.example:mylib:1.2.3") != before

    def test_missing_artifact(self, maven_repo: MavenRepository) -> None:
        with pytest.raises(ArtifactNotFoundError):
            ArtifactIdentity(maven_repo).compute("com.example:other:9.9")

    def test_invalid_identifier(self, maven_repo: MavenRepository) -> None:
        with pytest.raises(InvalidArtifactIdError):
            ArtifactIdentity(maven_repo).compute("bogus")
