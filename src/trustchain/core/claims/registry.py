"""Claim registry --- persistent, content-addressed store of signed claims.

Layout::

    <root>/<hex-sha256-of-artifact>/<claim-id>
    <root>/<hex-sha256-of-artifact>/<claim-id>.sig

One folder per artifact digest, no further sharding.

Claim lifecycle
---------------
``staged`` (random name in the staging directory) -> ``signed`` (detached
signature written next to it) -> ``stored`` (pair relocated into the
artifact's folder, named by the claim id). Stored claims are never edited
or deleted; a ``RevocationClaim`` referencing the id supersedes a claim
without touching it. Whatever happens during stage-sign-relocate, the
staged pair is removed before the call returns.

Concurrency
-----------
Several uncoordinated processes may share a registry. Claim ids are UUID4,
folder creation tolerates existing folders, and enumeration works on a
snapshot of the folder listing: files appearing or vanishing mid-scan are
either picked up or skipped. Writers only ever expose complete files under
final names, the signature before the data, so a listed claim always has
its whole signature beside it. Partial copies under their temporary names
are ignored.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from trustchain.core.artifacts.models import ArtifactId
from trustchain.core.claims.models import (
    AuthenticatedClaim,
    Claim,
    PositiveClaim,
    RevocationClaim,
    claim_from_json,
    claim_to_json,
    is_claim_id,
    new_claim_id,
)
from trustchain.core.signing.documents import (
    PARTIAL_PREFIX,
    SIGNATURE_SUFFIX,
    SignedFilePath,
)
from trustchain.core.signing.engine import SignatureEngine
from trustchain.core.signing.status import PublicKey, normalize_fingerprint
from trustchain.exceptions import (
    ClaimAlreadyRevokedError,
    ClaimFormatError,
    ClaimNotFoundError,
    ClaimsError,
    ConfigError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CLAIM_SIZE: int = 65536


def _same_key(first: PublicKey, second: PublicKey) -> bool:
    return normalize_fingerprint(first.fingerprint) == normalize_fingerprint(
        second.fingerprint
    )


class ClaimRegistry(ABC):
    """Abstract claim registry."""

    @abstractmethod
    def sign_claim(
        self,
        identifier: str,
        artifact_id: ArtifactId,
        claim_key: str,
        claim_value: str | None = None,
        comment: str | None = None,
    ) -> str:
        """Create, sign, and store a positive claim. Returns the claim id."""

    @abstractmethod
    def revoke_claim(
        self,
        identifier: str,
        artifact_id: ArtifactId,
        claim_id: str,
        comment: str | None = None,
    ) -> str:
        """Create, sign, and store a revocation of ``claim_id``. Returns its id."""

    @abstractmethod
    def verify_claim(self, artifact_id: ArtifactId, claim_file_name: str) -> PublicKey:
        """Verify a stored claim's signature and return the signer's key."""

    @abstractmethod
    def authenticated_claims_for(self, artifact_id: ArtifactId) -> Iterator[AuthenticatedClaim]:
        """Lazily yield every stored claim whose signature verifies."""

    @abstractmethod
    def raw_claims_for(self, artifact_id: ArtifactId) -> Iterator[Claim]:
        """Lazily yield every parseable stored claim without verifying it."""


class FileSystemClaimRegistry(ClaimRegistry):
    """Claim registry stored in a directory tree.

    Args:
        root: Registry root. Created if missing.
        engine: Signature engine used to sign and verify claim documents.
        signer_uid: Identity recorded in new claims. Required for signing
            and revoking only.
        staging_dir: Where claims are staged before signing. Defaults to
            the system temporary directory.
        max_claim_size: Largest claim document (bytes) that is written or
            read.

    Raises:
        ClaimsError: If the registry root cannot be created.
    """

    def __init__(
        self,
        root: Path,
        engine: SignatureEngine,
        signer_uid: str | None = None,
        *,
        staging_dir: Path | None = None,
        max_claim_size: int = DEFAULT_MAX_CLAIM_SIZE,
    ) -> None:
        self.root = Path(root)
        self.engine = engine
        self.signer_uid = signer_uid
        self.staging_dir = Path(staging_dir) if staging_dir is not None else None
        self.max_claim_size = max_claim_size
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ClaimsError(
                f"cannot create claim registry at '{self.root}'",
                subject=self.root,
                cause=exc,
            ) from exc

    # -- Folder layout ------------------------------------------------------

    def artifact_folder(self, artifact_id: ArtifactId, create: bool = False) -> Path:
        """Return the folder holding claims for ``artifact_id``.

        Raises:
            ClaimsError: If ``create`` is set and the folder cannot be created.
        """
        folder = self.root / artifact_id.hex
        if create:
            try:
                folder.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ClaimsError(
                    f"error creating folder '{folder}'", subject=folder, cause=exc
                ) from exc
        return folder

    def _require_signer(self) -> str:
        if not self.signer_uid:
            raise ConfigError(
                "no signer identity configured (set signer_uid)",
                subject="signer_uid",
            )
        return self.signer_uid

    # -- Stage, sign, relocate ---------------------------------------------

    def _sign_and_store(
        self, claim: Claim, kind_of_file: str, required_key: PublicKey | None = None
    ) -> None:
        """Stage, sign, and relocate ``claim``.

        When ``required_key`` is given, the staged signature must verify
        to that key's fingerprint or nothing is stored.
        """
        document = claim_to_json(claim)
        size = len(document.encode("utf-8"))
        if size > self.max_claim_size:
            raise ClaimsError(
                f"{kind_of_file} {claim.id} is {size} bytes, "
                f"larger than the {self.max_claim_size} byte limit",
                subject=claim.id,
            )

        staged = SignedFilePath.staged(self.staging_dir)
        try:
            staged.create_data_file(document, kind_of_file)
            self.engine.sign(staged, kind_of_file)
            if required_key is not None:
                signed_by = self.engine.verify(staged)
                if not _same_key(signed_by, required_key):
                    raise ClaimsError(
                        f"{kind_of_file} {claim.id} was signed by key "
                        f"{signed_by.fingerprint}, not by {required_key.fingerprint}",
                        subject=claim.id,
                    )
            folder = self.artifact_folder(claim.artifact_id, create=True)
            staged.move_to(SignedFilePath.at(folder, claim.id), kind_of_file)
        finally:
            staged.discard()
        logger.info("stored %s %s for artifact %s", kind_of_file, claim.id, claim.artifact_id)

    def sign_claim(
        self,
        identifier: str,
        artifact_id: ArtifactId,
        claim_key: str,
        claim_value: str | None = None,
        comment: str | None = None,
    ) -> str:
        """Create, sign, and store a positive claim.

        Args:
            identifier: Repository locator of the artifact.
            artifact_id: Content digest of the artifact.
            claim_key: Claim kind, e.g. "reviewed".
            claim_value: Optional free-text value.
            comment: Optional comment.

        Returns:
            The new claim id.

        Raises:
            ConfigError: If no signer identity is configured.
            ClaimsError, StorageError: On any filesystem failure.
            SigningError: If the engine cannot sign.
        """
        if not claim_key:
            raise ClaimsError("claim key must not be empty", subject=identifier)
        claim = PositiveClaim(
            id=new_claim_id(),
            uid=self._require_signer(),
            artifact_id=artifact_id,
            identifier=identifier,
            comment=comment,
            timestamp=datetime.now(timezone.utc),
            claim_kind=claim_key,
            claim_value=claim_value,
        )
        self._sign_and_store(claim, "claim")
        return claim.id

    def revoke_claim(
        self,
        identifier: str,
        artifact_id: ArtifactId,
        claim_id: str,
        comment: str | None = None,
    ) -> str:
        """Revoke a stored positive claim made by this registry's signer.

        The target must exist, verify, be a positive claim, and carry the
        same signer identity. The revocation must be signed by the key
        that signed the target. No revocation of it signed by that key may
        exist yet; revocations signed by other keys are ignored, as they
        are by the trust policies. Revocation is permanent.

        Returns:
            The id of the stored revocation claim.

        Raises:
            ClaimNotFoundError: If the target claim is not stored.
            ClaimAlreadyRevokedError: If the owner already revoked it.
            ClaimsError: If the target is not revocable by this signer or
                the engine signs with a different key.
            InvalidSignatureError: (and the other verification errors) if
                the target or an existing revocation fails verification.
        """
        signer = self._require_signer()
        folder = self.artifact_folder(artifact_id)
        if not is_claim_id(claim_id):
            raise ClaimNotFoundError(
                f"'{claim_id}' is not a claim id", subject=claim_id
            )
        target_path = SignedFilePath.at(folder, claim_id)
        if not (folder.is_dir() and target_path.exists()):
            raise ClaimNotFoundError(
                f"claim {claim_id} not found for artifact {artifact_id}",
                subject=claim_id,
            )

        try:
            target = self._read_claim(target_path)
        except OSError as exc:
            raise ClaimsError(
                f"cannot read claim {claim_id}", subject=target_path.data_path, cause=exc
            ) from exc
        owner = self.engine.verify(target_path)
        if target.id != claim_id or target.artifact_id != artifact_id:
            raise ClaimsError(
                f"claim file {claim_id} does not describe artifact {artifact_id}",
                subject=claim_id,
            )
        if not isinstance(target, PositiveClaim):
            raise ClaimsError(
                f"claim {claim_id} is a revocation and cannot be revoked",
                subject=claim_id,
            )
        if target.uid != signer:
            raise ClaimsError(
                f"claim {claim_id} was made by '{target.uid}', not by '{signer}'",
                subject=claim_id,
            )

        for path, existing in self._iter_documents(artifact_id):
            if not (isinstance(existing, RevocationClaim) and existing.revoked_id == claim_id):
                continue
            revoker = self.engine.verify(path)
            if not _same_key(revoker, owner):
                logger.warning(
                    "ignoring revocation %s of claim %s signed by foreign key %s",
                    existing.id,
                    claim_id,
                    revoker.fingerprint,
                )
                continue
            raise ClaimAlreadyRevokedError(
                f"claim {claim_id} was already revoked by {existing.id}",
                subject=claim_id,
            )

        revocation = RevocationClaim(
            id=new_claim_id(),
            uid=signer,
            artifact_id=artifact_id,
            identifier=identifier,
            comment=comment,
            timestamp=datetime.now(timezone.utc),
            revoked_id=claim_id,
        )
        self._sign_and_store(revocation, "revocation", required_key=owner)
        return revocation.id

    # -- Verification -------------------------------------------------------

    def verify_claim(self, artifact_id: ArtifactId, claim_file_name: str) -> PublicKey:
        """Verify the named claim file for ``artifact_id``.

        Raises:
            ClaimNotFoundError: If the artifact folder, the claim file, or
                its signature is missing.
            InvalidSignatureError: (and the other verification errors) if
                the signature does not verify.
        """
        folder = self.artifact_folder(artifact_id)
        if not folder.is_dir():
            raise ClaimNotFoundError(
                f"claim file {claim_file_name} not found for artifact with hash {artifact_id}",
                subject=claim_file_name,
            )
        if not claim_file_name or os.sep in claim_file_name or "/" in claim_file_name:
            raise ClaimNotFoundError(
                f"'{claim_file_name}' is not a claim file name", subject=claim_file_name
            )
        path = SignedFilePath.at(folder, claim_file_name)
        if not path.data_path.is_file():
            raise ClaimNotFoundError(
                f"claim file {claim_file_name} not found for artifact with hash {artifact_id}",
                subject=path.data_path,
            )
        if not path.sig_path.is_file():
            raise ClaimNotFoundError(
                f"signature for claim file {claim_file_name} not found",
                subject=path.sig_path,
            )
        return self.engine.verify(path)

    # -- Enumeration --------------------------------------------------------

    def _read_claim(self, path: SignedFilePath) -> Claim:
        size = path.data_path.stat().st_size
        if size > self.max_claim_size:
            raise ClaimFormatError(
                f"claim file too long ({size} bytes)", subject=path.data_path
            )
        return claim_from_json(path.data_path.read_bytes())

    def _iter_documents(self, artifact_id: ArtifactId) -> Iterator[tuple[SignedFilePath, Claim]]:
        """Yield (pair, claim) for every readable claim file.

        Unreadable, oversized, unparseable, half-written, or misfiled
        entries are logged and skipped.
        """
        folder = self.artifact_folder(artifact_id)
        if not folder.is_dir():
            return
        logger.debug("looking for claims in %s", folder)

        try:
            with os.scandir(folder) as it:
                names = sorted(e.name for e in it if not e.name.endswith(SIGNATURE_SUFFIX))
        except OSError:
            logger.error("cannot list claim folder %s", folder, exc_info=True)
            return

        for name in names:
            if name.startswith(PARTIAL_PREFIX):
                logger.debug("skipping partial copy %s", folder / name)
                continue
            path = SignedFilePath.at(folder, name)
            if not path.data_path.is_file():
                continue
            if not path.sig_path.is_file():
                logger.warning("skipping claim %s without signature file", path.data_path)
                continue
            try:
                claim = self._read_claim(path)
            except (OSError, ClaimFormatError) as exc:
                logger.warning("skipping unreadable claim %s: %s", path.data_path, exc)
                continue
            if claim.id != name or claim.artifact_id != artifact_id:
                logger.warning("skipping misfiled claim %s", path.data_path)
                continue
            yield path, claim

    def raw_claims_for(self, artifact_id: ArtifactId) -> Iterator[Claim]:
        """Yield stored claims for ``artifact_id`` without verifying signatures.

        Yields nothing if the artifact has no folder.
        """
        for _, claim in self._iter_documents(artifact_id):
            yield claim

    def authenticated_claims_for(self, artifact_id: ArtifactId) -> Iterator[AuthenticatedClaim]:
        """Yield stored claims for ``artifact_id`` after verifying each signature.

        Entries that cannot be read or parsed are skipped with a warning.
        A claim whose signature fails verification is not skipped: the
        verification error propagates.
        """
        for path, claim in self._iter_documents(artifact_id):
            signer = self.engine.verify(path)
            yield AuthenticatedClaim(claim=claim, signer=signer)
