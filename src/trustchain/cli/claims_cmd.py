"""``trustchain claims`` -- List the claims stored for an artifact."""

from __future__ import annotations

import json

import click

from trustchain.cli.common import artifact_option, fail, format_option, get_service
from trustchain.cli.output import claim_to_json, print_claims, print_raw_claims
from trustchain.exceptions import TrustChainError


@click.command("claims")
@artifact_option
@click.option("--raw", is_flag=True, default=False,
              help="List claims without verifying their signatures.")
@format_option
@click.pass_context
def claims_command(ctx: click.Context, identifier: str, raw: bool, output_format: str) -> None:
    """List the claims about an artifact.

    By default every claim's signature is verified first; a claim that
    fails verification aborts the listing with exit code 2.
    """
    try:
        service = get_service(ctx)
        if raw:
            raw_claims = service.raw_claims_for(identifier)
        else:
            claims = service.claims_for(identifier)
    except TrustChainError as exc:
        fail(exc, output_format)

    if output_format == "json":
        if raw:
            payload = [claim_to_json(c) for c in raw_claims]
        else:
            payload = [claim_to_json(c.claim, c.signer.fingerprint) for c in claims]
        click.echo(json.dumps(payload, indent=2))
    elif raw:
        print_raw_claims(raw_claims)
    else:
        print_claims(claims)
