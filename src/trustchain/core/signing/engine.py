"""Signature service --- detached signing and verification.

``SignatureEngine`` is the abstract capability used by the claim registry.
``GpgSignatureEngine`` implements it by running ``gpg`` as a subprocess:

- **sign**: ``gpg --detach-sign --armor --local-user <uid> --output <sig> <data>``.
  Only the exit status matters; stdout is not parsed.
- **verify**: ``gpg --status-fd 1 --verify <sig> <data>``. The status
  stream on stdout is interpreted by
  :func:`trustchain.core.signing.status.interpret_verify_status`.

Both calls run with a timeout. Expiry raises ``SigningTimeoutError``,
which callers may retry.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from trustchain.core.signing.documents import SignedFilePath
from trustchain.core.signing.status import PublicKey, interpret_verify_status
from trustchain.exceptions import ConfigError, SigningError, SigningTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 60.0


class SignatureEngine(ABC):
    """Abstract detached-signature engine."""

    @abstractmethod
    def sign(self, document: SignedFilePath, kind_of_file: str = "document") -> None:
        """Write a detached signature for ``document.data_path`` to ``document.sig_path``.

        Raises:
            SigningError: If signing fails for any reason.
        """

    @abstractmethod
    def verify(self, document: SignedFilePath) -> PublicKey:
        """Verify ``document`` and return the signer's key.

        Raises:
            InvalidSignatureError, ExpiredSignatureError,
            ExpiredKeySignatureError, SignatureFormatError, SigningError
        """


class GpgSignatureEngine(SignatureEngine):
    """GnuPG-backed signature engine.

    Args:
        signer_uid: Key selector passed to ``--local-user``. Required for
            signing, not for verification.
        program: The gpg executable.
        homedir: Optional ``--homedir`` keyring location.
        timeout: Seconds to wait for gpg. None waits forever.
    """

    def __init__(
        self,
        signer_uid: str | None = None,
        *,
        program: str = "gpg",
        homedir: Path | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self.signer_uid = signer_uid
        self.program = program
        self.homedir = Path(homedir) if homedir is not None else None
        self.timeout = timeout

    def _base_command(self) -> list[str]:
        command = [self.program]
        if self.homedir is not None:
            command += ["--homedir", str(self.homedir)]
        return command

    def sign_command(self, document: SignedFilePath) -> list[str]:
        if not self.signer_uid:
            raise ConfigError(
                "no signer identity configured (set signer_uid)",
                subject="signer_uid",
            )
        return self._base_command() + [
            "--detach-sign",
            "--armor",
            "--local-user",
            self.signer_uid,
            "--output",
            str(document.sig_path),
            str(document.data_path),
        ]

    def verify_command(self, document: SignedFilePath) -> list[str]:
        return self._base_command() + [
            "--status-fd",
            "1",
            "--verify",
            str(document.sig_path),
            str(document.data_path),
        ]

    def _run(self, command: list[str], description: str, subject: Path) -> subprocess.CompletedProcess:
        logger.debug("running %s", command)
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise SigningTimeoutError(
                f"{description}: {self.program} did not finish within "
                f"{self.timeout} seconds",
                subject=subject,
                cause=exc,
            ) from exc
        except OSError as exc:
            raise SigningError(
                f"{description}: cannot run {self.program}",
                subject=subject,
                cause=exc,
            ) from exc

    def sign(self, document: SignedFilePath, kind_of_file: str = "document") -> None:
        command = self.sign_command(document)
        description = (
            f"error signing {kind_of_file} in '{document.data_path}' "
            f"(signature file '{document.sig_path}')"
        )
        result = self._run(command, description, document.data_path)
        if result.returncode != 0:
            detail = (result.stderr or "").strip().splitlines()
            raise SigningError(
                f"{description}: exit status {result.returncode}"
                + (f": {detail[-1]}" if detail else ""),
                subject=document.data_path,
            )

    def verify(self, document: SignedFilePath) -> PublicKey:
        command = self.verify_command(document)
        result = self._run(
            command, f"error verifying '{document.data_path}'", document.data_path
        )
        return interpret_verify_status(
            result.stdout or "", result.returncode, subject=document.data_path
        )
