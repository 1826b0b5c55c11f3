"""Shared fixtures for trustchain tests.

``FakeSignatureEngine`` stands in for gpg: its "signature" is the SHA-256
of the data file plus the signer fingerprint, so any change to the data
after signing is detected as a BAD signature, exactly as gpg would.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Iterator

import pytest

from trustchain.core.artifacts import MavenRepository
from trustchain.core.claims import FileSystemClaimRegistry
from trustchain.core.signing import PublicKey, SignatureEngine, SignedFilePath
from trustchain.exceptions import InvalidSignatureError, SignatureFormatError, SigningError

FAKE_FINGERPRINT = "0123456789ABCDEF0123456789ABCDEF01234567"
SIGNER_UID = "alice@example.com"
MAVEN_ID = "com.example:mylib:1.2.3"


class FakeSignatureEngine(SignatureEngine):
    """Deterministic in-process signature engine for tests."""

    def __init__(self, fingerprint: str = FAKE_FINGERPRINT, fail_signing: bool = False) -> None:
        self.fingerprint = fingerprint
        self.fail_signing = fail_signing
        self.signed: list[Path] = []
        self.verified: list[Path] = []

    def sign(self, document: SignedFilePath, kind_of_file: str = "document") -> None:
        if self.fail_signing:
            raise SigningError(f"error signing {kind_of_file}", subject=document.data_path)
        digest = hashlib.sha256(document.data_path.read_bytes()).hexdigest()
        document.sig_path.write_text(f"FAKE-SIG {digest} {self.fingerprint}\n")
        self.signed.append(document.data_path)

    def verify(self, document: SignedFilePath) -> PublicKey:
        self.verified.append(document.data_path)
        parts = document.sig_path.read_text().split()
        if len(parts) != 3 or parts[0] != "FAKE-SIG":
            raise SignatureFormatError("malformed signature", subject=document.sig_path)
        digest = hashlib.sha256(document.data_path.read_bytes()).hexdigest()
        if digest != parts[1]:
            raise InvalidSignatureError("BAD signature", subject=document.data_path)
        return PublicKey(fingerprint=parts[2], uid=SIGNER_UID)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo the CLI's logger setup so caplog sees trustchain records."""
    logger = logging.getLogger("trustchain")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def fake_engine() -> FakeSignatureEngine:
    return FakeSignatureEngine()


@pytest.fixture
def foreign_engine() -> FakeSignatureEngine:
    """A second engine holding a different key."""
    return FakeSignatureEngine(fingerprint="B" * 40)


@pytest.fixture
def maven_root(tmp_path: Path) -> Path:
    """A local Maven repository holding com.example:mylib:1.2.3."""
    root = tmp_path / "m2"
    jar_dir = root / "com" / "example" / "mylib" / "1.2.3"
    jar_dir.mkdir(parents=True)
    (jar_dir / "mylib-1.2.3.jar").write_bytes(b"PK\x03\x04 fake jar content")
    return root


@pytest.fixture
def maven_repo(maven_root: Path) -> MavenRepository:
    return MavenRepository(maven_root)


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def registry(
    tmp_path: Path, fake_engine: FakeSignatureEngine, staging_dir: Path
) -> FileSystemClaimRegistry:
    return FileSystemClaimRegistry(
        tmp_path / "registry",
        fake_engine,
        SIGNER_UID,
        staging_dir=staging_dir,
    )


@pytest.fixture
def config_file(tmp_path: Path, maven_root: Path, staging_dir: Path) -> Path:
    """A YAML config pointing at the temporary repository and registry."""
    path = tmp_path / "config.yaml"
    path.write_text(
        f"registry_root: {tmp_path / 'registry'}\n"
        f"repository_root: {maven_root}\n"
        f"staging_dir: {staging_dir}\n"
        f"signer_uid: {SIGNER_UID}\n"
        "pass_threshold: 0.5\n"
        "policy: distinct-kinds\n"
        "policy_options:\n"
        "  saturation: 2\n"
    )
    return path
