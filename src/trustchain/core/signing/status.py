"""Interpretation of the signing engine's machine-readable status stream.

During verification the engine writes one record per line to stdout, each
prefixed with ``[GNUPG:]`` and a keyword. The records are read in order
in a single pass:

=========== ==========================================================
VALIDSIG    Valid signature. Captures the fingerprint (primary-key
            field when present, otherwise the signing-key field).
GOODSIG     Signature matches the key. Informational, captures the uid.
EXPKEYSIG   Key expired, signature otherwise valid. Logged as a warning.
BADSIG      Signature does not match. ``InvalidSignatureError``.
EXPSIG      Signature expired. ``ExpiredSignatureError``.
REVKEYSIG   Key revoked. ``ExpiredKeySignatureError``.
ERRSIG      Malformed or unusable signature. ``SignatureFormatError``.
=========== ==========================================================

The last four are terminal: the first one found raises immediately and
the remaining lines are not read. Everything else (NEWSIG, TRUST_*,
KEY_CONSIDERED, ...) is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from trustchain.exceptions import (
    ExpiredKeySignatureError,
    ExpiredSignatureError,
    InvalidSignatureError,
    SignatureFormatError,
    SignatureOutputError,
    SignatureProcessError,
)

logger = logging.getLogger(__name__)

STATUS_PREFIX: str = "[GNUPG:]"

# Index of the primary-key fingerprint among VALIDSIG arguments.
_VALIDSIG_PRIMARY_FIELD: int = 9


@dataclass(frozen=True)
class PublicKey:
    """Signer identity extracted from a successful verification.

    Carries no trust of its own; deciding whether a fingerprint is
    trusted is the job of a ``TrustPolicy``.

    Attributes:
        fingerprint: Key fingerprint reported by the engine.
        uid: User id reported alongside the signature, if any.
    """

    fingerprint: str
    uid: str | None = None

    def __str__(self) -> str:
        return self.fingerprint


def normalize_fingerprint(fingerprint: str) -> str:
    """Upper-case a fingerprint and drop embedded spaces."""
    return fingerprint.replace(" ", "").upper()


@dataclass(frozen=True)
class StatusRecord:
    """One parsed status line: keyword plus raw argument text."""

    keyword: str
    argument_text: str = ""

    @property
    def args(self) -> list[str]:
        return self.argument_text.split()

    def key_and_uid(self) -> tuple[str | None, str | None]:
        """Split ``<keyid> <user id with spaces>`` style arguments."""
        parts = self.argument_text.split(" ", 1)
        key_id = parts[0] or None
        uid = parts[1].strip() if len(parts) > 1 and parts[1].strip() else None
        return key_id, uid


def parse_status_lines(lines: Iterable[str]) -> Iterator[StatusRecord]:
    """Yield a ``StatusRecord`` for every status-prefixed line."""
    for raw in lines:
        line = raw.strip()
        if not line.startswith(STATUS_PREFIX):
            continue
        body = line[len(STATUS_PREFIX):].strip()
        if not body:
            continue
        keyword, _, rest = body.partition(" ")
        yield StatusRecord(keyword=keyword, argument_text=rest.strip())


def interpret_verify_status(
    output: str,
    returncode: int,
    subject: str | Path | None = None,
) -> PublicKey:
    """Turn the engine's verification output into a verdict.

    Args:
        output: Everything the engine wrote to its status stream.
        returncode: The engine's exit status.
        subject: The verified data file, for error messages.

    Returns:
        The signer's ``PublicKey``.

    Raises:
        InvalidSignatureError: On BADSIG.
        ExpiredSignatureError: On EXPSIG.
        ExpiredKeySignatureError: On REVKEYSIG.
        SignatureFormatError: On ERRSIG.
        SignatureProcessError: If no fingerprint was found and the engine
            exited non-zero.
        SignatureOutputError: If no fingerprint was found although the
            engine exited cleanly.
    """
    fingerprint: str | None = None
    uid: str | None = None

    for record in parse_status_lines(output.splitlines()):
        keyword = record.keyword
        if keyword == "VALIDSIG":
            args = record.args
            if not args:
                continue
            if len(args) > _VALIDSIG_PRIMARY_FIELD and args[_VALIDSIG_PRIMARY_FIELD]:
                fingerprint = args[_VALIDSIG_PRIMARY_FIELD]
            else:
                fingerprint = args[0]
        elif keyword == "GOODSIG":
            uid = record.key_and_uid()[1] or uid
        elif keyword == "EXPKEYSIG":
            key_id, key_uid = record.key_and_uid()
            uid = key_uid or uid
            logger.warning(
                "signature on %s was made by expired key %s (%s)",
                subject, key_id, key_uid,
            )
        elif keyword == "BADSIG":
            key_id, key_uid = record.key_and_uid()
            raise InvalidSignatureError(
                f"BAD signature on '{subject}' by key {key_id} ({key_uid}), "
                "the data may have been tampered with",
                subject=subject,
            )
        elif keyword == "EXPSIG":
            key_id, key_uid = record.key_and_uid()
            raise ExpiredSignatureError(
                f"expired signature on '{subject}' by key {key_id} ({key_uid})",
                subject=subject,
            )
        elif keyword == "REVKEYSIG":
            key_id, key_uid = record.key_and_uid()
            raise ExpiredKeySignatureError(
                f"signature on '{subject}' was made by revoked key "
                f"{key_id} ({key_uid})",
                subject=subject,
                key_id=key_id,
                uid=key_uid,
            )
        elif keyword == "ERRSIG":
            key_id = record.args[0] if record.args else None
            raise SignatureFormatError(
                f"malformed or unverifiable signature on '{subject}' "
                f"(key {key_id})",
                subject=subject,
            )

    if fingerprint is not None:
        return PublicKey(fingerprint=fingerprint, uid=uid)
    if returncode != 0:
        raise SignatureProcessError(
            f"signature verification of '{subject}' failed "
            f"(engine exit status {returncode})",
            subject=subject,
        )
    raise SignatureOutputError(
        f"unrecognized verification output for '{subject}': "
        "no VALIDSIG record",
        subject=subject,
    )
