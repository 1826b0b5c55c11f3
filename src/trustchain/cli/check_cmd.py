"""``trustchain check`` -- Decide whether an artifact is trusted.

Evaluates the configured trust policy over the artifact's authenticated
claims and compares the result with the pass threshold.

Exit Codes:
    0 -- Trust level >= threshold.
    1 -- Trust level < threshold.
    2 -- Error (including any claim whose signature fails verification).
"""

from __future__ import annotations

import json
import sys

import click

from trustchain.cli.common import artifact_option, fail, format_option, get_service
from trustchain.cli.output import check_result_to_json, print_check_result
from trustchain.core.trust.models import CheckerConfig, TrustLevel
from trustchain.exceptions import TrustChainError


@click.command("check")
@artifact_option
@click.option("--threshold", type=click.FloatRange(0.0, 1.0), default=None,
              help="Override the configured pass threshold.")
@format_option
@click.pass_context
def check_command(
    ctx: click.Context,
    identifier: str,
    threshold: float | None,
    output_format: str,
) -> None:
    """Check an artifact against the trust threshold."""
    override = CheckerConfig(TrustLevel(threshold)) if threshold is not None else None
    try:
        service = get_service(ctx)
        artifact_id = service.compute_digest(identifier)
        result = service.checker.check(artifact_id, override)
    except TrustChainError as exc:
        fail(exc, output_format)

    if output_format == "json":
        click.echo(json.dumps(check_result_to_json(identifier, result), indent=2))
    else:
        print_check_result(identifier, result)

    sys.exit(0 if result.passed else 1)
