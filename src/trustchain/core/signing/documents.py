"""Signed document transfer --- data/signature file pairs on disk.

A ``SignedFilePath`` names a data file and its detached signature
(``<name>.sig``) in the same directory. Claims are written to a fresh
staged pair, signed there, and then relocated into the registry.

Consistency window
------------------
``copy_to`` writes each file under a temporary ``PARTIAL_PREFIX`` name in
the destination directory and renames it into place with ``os.replace``.
The signature is placed first and the data file last, so a reader that
sees a data file under its final name also sees its complete signature.
A process dying mid-copy leaves a hidden partial file, which readers
ignore. A process dying between the two renames leaves a signature
without a data file, which readers never list. ``move_to`` then deletes
the originals; dying before that leaves the staged pair behind (harmless,
it is in the staging directory under random names). When ``move_to``
itself fails it removes whatever it already placed at the destination.

Staged names are random and never equal to the final claim id, so
concurrent signers sharing one staging directory cannot collide.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path

from trustchain.exceptions import ClaimsError, StorageError

logger = logging.getLogger(__name__)

SIGNATURE_SUFFIX: str = ".sig"
STAGING_PREFIX: str = "trustchain-staged-"
PARTIAL_PREFIX: str = ".trustchain-partial-"


@dataclass(frozen=True)
class SignedFilePath:
    """A pair of paths: a data file and its detached signature file.

    Attributes:
        data_path: Path of the signed data.
        sig_path: Path of the armored detached signature.
    """

    data_path: Path
    sig_path: Path

    @classmethod
    def at(cls, base_path: Path, data_file_name: str) -> SignedFilePath:
        """Build the pair for ``data_file_name`` inside ``base_path``."""
        base = Path(base_path)
        return cls(
            data_path=base / data_file_name,
            sig_path=base / f"{data_file_name}{SIGNATURE_SUFFIX}",
        )

    @classmethod
    def staged(cls, staging_dir: Path | None = None) -> SignedFilePath:
        """Build a fresh pair with a random name in the staging directory.

        Args:
            staging_dir: Directory for staged files. Defaults to the
                system temporary directory.
        """
        base = Path(staging_dir) if staging_dir is not None else Path(tempfile.gettempdir())
        return cls.at(base, f"{STAGING_PREFIX}{uuid.uuid4().hex}")

    @property
    def name(self) -> str:
        """File name of the data file."""
        return self.data_path.name

    def exists(self) -> bool:
        """Return True if both the data file and the signature exist."""
        return self.data_path.is_file() and self.sig_path.is_file()

    def create_data_file(self, content: str, kind_of_file: str = "document") -> None:
        """Write ``content`` to a new data file.

        The file must not exist yet.

        Raises:
            StorageError: If the file exists or cannot be written.
        """
        try:
            with open(self.data_path, "x", encoding="utf-8") as handle:
                handle.write(content)
        except OSError as exc:
            raise StorageError(
                f"error creating {kind_of_file} file '{self.data_path}'",
                subject=self.data_path,
                cause=exc,
            ) from exc

    def copy_to(self, other: SignedFilePath, kind_of_file: str = "document") -> None:
        """Copy signature then data to ``other``, each one atomically.

        If the data copy fails the signature stays at the destination.

        Raises:
            StorageError: If either copy fails.
        """
        _replace_copy(self.sig_path, other.sig_path, f"{kind_of_file} signature")
        _replace_copy(self.data_path, other.data_path, kind_of_file)

    def move_to(self, other: SignedFilePath, kind_of_file: str = "document") -> None:
        """Relocate the pair to ``other`` (copy, then delete the originals).

        Raises:
            StorageError: If copying fails. Partial copies are removed.
            ClaimsError: If the originals cannot be removed after copying.
        """
        logger.debug("moving %s %s to %s", kind_of_file, self, other)
        try:
            self.copy_to(other, kind_of_file)
        except StorageError:
            other.discard()
            raise

        for path, what in ((self.data_path, kind_of_file),
                           (self.sig_path, f"{kind_of_file} signature")):
            try:
                path.unlink()
            except OSError as exc:
                raise ClaimsError(
                    f"error removing temporary {what} file '{path}'",
                    subject=path,
                    cause=exc,
                ) from exc

    def discard(self) -> None:
        """Best-effort removal of both files; missing files are ignored."""
        for path in (self.data_path, self.sig_path):
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("could not remove %s", path, exc_info=True)


def _replace_copy(source: Path, target: Path, what: str) -> None:
    """Copy ``source`` to a partial name beside ``target``, then rename it."""
    partial = target.with_name(f"{PARTIAL_PREFIX}{uuid.uuid4().hex}")
    try:
        shutil.copyfile(source, partial)
        os.replace(partial, target)
    except OSError as exc:
        try:
            partial.unlink(missing_ok=True)
        except OSError:
            logger.warning("could not remove %s", partial, exc_info=True)
        raise StorageError(
            f"error copying {what} from '{source}' to '{target}'",
            subject=source,
            cause=exc,
        ) from exc
