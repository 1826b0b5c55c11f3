"""Shared helpers for trustchain CLI commands.

Commands receive the loaded configuration through the Click context and
build a ``TrustChainService`` on demand. A pre-built ``SignatureEngine``
may be placed in ``ctx.obj["engine"]`` to replace gpg.

Exit Codes:
    0 -- Success (check passed).
    1 -- Check failed (trust below threshold).
    2 -- Any trustchain error (bad identifier, signature failure, ...).
"""

from __future__ import annotations

import json
import sys
from typing import NoReturn

import click

from trustchain.config import TrustChainConfig
from trustchain.core.service import TrustChainService
from trustchain.exceptions import TrustChainError

EXIT_ERROR: int = 2

format_option = click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)

artifact_option = click.option(
    "--artifact", "identifier",
    required=True,
    help="Repository locator of the artifact, e.g. com.example:mylib:1.2.3.",
)


def get_config(ctx: click.Context) -> TrustChainConfig:
    return ctx.obj["config"]


def get_service(ctx: click.Context) -> TrustChainService:
    """Build (once per invocation) the service for the loaded config."""
    obj = ctx.obj
    if obj.get("service") is None:
        obj["service"] = TrustChainService.from_config(
            get_config(ctx), engine=obj.get("engine")
        )
    return obj["service"]


def fail(error: TrustChainError, output_format: str) -> NoReturn:
    """Report ``error`` and exit with code 2."""
    if output_format == "json":
        click.echo(json.dumps({
            "error": str(error),
            "kind": error.kind.value,
            "subject": error.subject,
        }))
    else:
        click.echo(f"Error: {error}", err=True)
    sys.exit(EXIT_ERROR)
