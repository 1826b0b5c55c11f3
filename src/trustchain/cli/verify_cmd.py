"""``trustchain verify`` -- Verify one stored claim's signature.

Exit Codes:
    0 -- The signature is valid; the signer fingerprint is printed.
    2 -- Claim missing, signature invalid, expired, or made by a revoked key.
"""

from __future__ import annotations

import json

import click

from trustchain.cli.common import artifact_option, fail, format_option, get_service
from trustchain.exceptions import TrustChainError


@click.command("verify")
@artifact_option
@click.option("--claim-file", "claim_file_name", required=True,
              help="File name of the claim to verify (its claim id).")
@format_option
@click.pass_context
def verify_command(
    ctx: click.Context,
    identifier: str,
    claim_file_name: str,
    output_format: str,
) -> None:
    """Verify the signature of a stored claim."""
    try:
        key = get_service(ctx).verify_claim(identifier, claim_file_name)
    except TrustChainError as exc:
        fail(exc, output_format)

    if output_format == "json":
        click.echo(json.dumps({
            "claim": claim_file_name,
            "valid": True,
            "fingerprint": key.fingerprint,
            "uid": key.uid,
        }))
    else:
        click.echo(f"valid signature by {key.fingerprint}")
