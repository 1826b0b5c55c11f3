"""Artifact identity model.

``ArtifactId`` is the content digest that names an artifact's bytes. It is
produced fresh by hashing and never persisted on its own; the registry uses
its hex form as a folder name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DIGEST_SIZE: int = 32

_HEX_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


@dataclass(frozen=True)
class ArtifactId:
    """A 256-bit content digest identifying an artifact.

    Equality is byte equality of the digest. Instances are immutable and
    hashable, so they can be used as dictionary keys.

    Attributes:
        digest: The raw SHA-256 digest (32 bytes).
    """

    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.digest, bytes) or len(self.digest) != DIGEST_SIZE:
            raise ValueError(
                f"ArtifactId digest must be {DIGEST_SIZE} bytes, "
                f"got {self.digest!r}"
            )

    @property
    def hex(self) -> str:
        """Lower-case hexadecimal form of the digest."""
        return self.digest.hex()

    @classmethod
    def from_hex(cls, value: str) -> ArtifactId:
        """Parse a 64-character hex digest.

        Raises:
            ValueError: If ``value`` is not a lower- or upper-case hex
                SHA-256 digest.
        """
        normalized = value.strip().lower()
        if not _HEX_DIGEST_RE.match(normalized):
            raise ValueError(f"not a hex SHA-256 digest: {value!r}")
        return cls(bytes.fromhex(normalized))

    def __str__(self) -> str:
        return self.hex


def is_hex_digest(value: str) -> bool:
    """Return True if ``value`` is a lower-case 64-character hex digest."""
    return bool(_HEX_DIGEST_RE.match(value))
