"""Detached signatures for claim documents.

Submodules:
    documents  -- SignedFilePath (data/signature pair, staging and relocation)
    status     -- PublicKey, fingerprint normalisation, status-stream interpreter
    engine     -- SignatureEngine, GpgSignatureEngine
"""

from trustchain.core.signing.documents import SIGNATURE_SUFFIX, SignedFilePath
from trustchain.core.signing.engine import GpgSignatureEngine, SignatureEngine
from trustchain.core.signing.status import (
    PublicKey,
    StatusRecord,
    interpret_verify_status,
    normalize_fingerprint,
    parse_status_lines,
)

__all__ = [
    "SIGNATURE_SUFFIX",
    "GpgSignatureEngine",
    "PublicKey",
    "SignatureEngine",
    "SignedFilePath",
    "StatusRecord",
    "interpret_verify_status",
    "normalize_fingerprint",
    "parse_status_lines",
]
