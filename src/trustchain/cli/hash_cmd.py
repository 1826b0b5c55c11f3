"""``trustchain hash --artifact <id>`` -- Print an artifact's content digest."""

from __future__ import annotations

import json

import click

from trustchain.cli.common import artifact_option, fail, format_option, get_service
from trustchain.exceptions import TrustChainError


@click.command("hash")
@artifact_option
@format_option
@click.pass_context
def hash_command(ctx: click.Context, identifier: str, output_format: str) -> None:
    """Calculate an artifact's hash.

    Resolves the artifact in the local repository and prints the hex
    SHA-256 digest of its content (recursively, for directories).
    """
    try:
        artifact_id = get_service(ctx).compute_digest(identifier)
    except TrustChainError as exc:
        fail(exc, output_format)

    if output_format == "json":
        click.echo(json.dumps({"identifier": identifier, "artifact_id": artifact_id.hex}))
    else:
        click.echo(artifact_id.hex)
