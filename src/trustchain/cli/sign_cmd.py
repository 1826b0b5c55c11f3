"""``trustchain sign`` -- Sign a claim about an artifact.

Hashes the artifact, writes a claim document, signs it with the
configured signer identity, and stores it in the registry under the
artifact's digest.
"""

from __future__ import annotations

import json

import click

from trustchain.cli.common import artifact_option, fail, format_option, get_service
from trustchain.exceptions import TrustChainError


@click.command("sign")
@artifact_option
@click.option("--claim-key", required=True, help="The claim's kind, e.g. 'reviewed'.")
@click.option("--claim-value", default=None, help="The claim's value, if any.")
@click.option("--comment", default=None, help="Optional free-text comment.")
@format_option
@click.pass_context
def sign_command(
    ctx: click.Context,
    identifier: str,
    claim_key: str,
    claim_value: str | None,
    comment: str | None,
    output_format: str,
) -> None:
    """Sign a claim about an artifact and store it in the registry."""
    try:
        claim_id = get_service(ctx).sign_claim(identifier, claim_key, claim_value, comment)
    except TrustChainError as exc:
        fail(exc, output_format)

    if output_format == "json":
        click.echo(json.dumps({"identifier": identifier, "claim_id": claim_id}))
    else:
        click.echo(f"claim id: {claim_id}")
