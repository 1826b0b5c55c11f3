"""``trustchain revoke`` -- Revoke a claim you signed earlier.

Stores a signed revocation referencing the claim. The original claim
stays in the registry but no longer counts towards trust.
"""

from __future__ import annotations

import json

import click

from trustchain.cli.common import artifact_option, fail, format_option, get_service
from trustchain.exceptions import TrustChainError


@click.command("revoke")
@artifact_option
@click.option("--claim-id", required=True, help="Id of the claim to revoke.")
@click.option("--comment", default=None, help="Optional reason for the revocation.")
@format_option
@click.pass_context
def revoke_command(
    ctx: click.Context,
    identifier: str,
    claim_id: str,
    comment: str | None,
    output_format: str,
) -> None:
    """Revoke a claim about an artifact."""
    try:
        revocation_id = get_service(ctx).revoke_claim(identifier, claim_id, comment)
    except TrustChainError as exc:
        fail(exc, output_format)

    if output_format == "json":
        click.echo(json.dumps({
            "identifier": identifier,
            "revoked_id": claim_id,
            "revocation_id": revocation_id,
        }))
    else:
        click.echo(f"revocation id: {revocation_id}")
