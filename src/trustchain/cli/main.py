"""trustchain CLI -- Verifiable trust chains for build artifacts.

Entry point for the ``trustchain`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    hash    -- Calculate an artifact's content digest.
    sign    -- Sign a claim about an artifact.
    verify  -- Verify a stored claim's signature.
    revoke  -- Revoke a claim you signed.
    claims  -- List the claims stored for an artifact.
    check   -- Check an artifact against the trust threshold.

Usage::

    trustchain hash --artifact com.example:mylib:1.2.3
    trustchain sign --artifact com.example:mylib:1.2.3 --claim-key reviewed
    trustchain verify --artifact com.example:mylib:1.2.3 --claim-file <claim-id>
    trustchain revoke --artifact com.example:mylib:1.2.3 --claim-id <claim-id>
    trustchain claims --artifact com.example:mylib:1.2.3
    trustchain check --artifact com.example:mylib:1.2.3 --threshold 0.5
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from trustchain import __version__
from trustchain.cli.check_cmd import check_command
from trustchain.cli.claims_cmd import claims_command
from trustchain.cli.common import EXIT_ERROR
from trustchain.cli.hash_cmd import hash_command
from trustchain.cli.revoke_cmd import revoke_command
from trustchain.cli.sign_cmd import sign_command
from trustchain.cli.verify_cmd import verify_command
from trustchain.config import load_config
from trustchain.core.artifacts.backends import DECLARED_KINDS
from trustchain.exceptions import ConfigError

LOG_LEVEL_ENV: str = "TRUSTCHAIN_LOG"


def configure_logging(level: str) -> None:
    """Send trustchain log records to stderr through Rich."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger = logging.getLogger("trustchain")
    logger.handlers[:] = [handler]
    logger.setLevel(level.upper())
    logger.propagate = False


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="YAML configuration file.")
@click.option("--repository-kind", type=click.Choice(["maven", *DECLARED_KINDS],
              case_sensitive=False), default=None, help="Artifact repository layout.")
@click.option("--repository", "repository_root", type=click.Path(file_okay=False),
              default=None, help="Root of the local artifact repository.")
@click.option("--registry", "registry_root", type=click.Path(file_okay=False),
              default=None, help="Root of the claim registry.")
@click.option("--signer", "signer_uid", default=None,
              help="Signer identity used for new claims.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"],
              case_sensitive=False), default=None,
              help=f"Log level (default: ${LOG_LEVEL_ENV} or WARNING).")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    repository_kind: str | None,
    repository_root: str | None,
    registry_root: str | None,
    signer_uid: str | None,
    log_level: str | None,
) -> None:
    """trustchain: Verifiable trust chains for build artifacts.

    Compute content digests of artifacts, attach signed claims to them,
    and decide whether an artifact is trusted from its verified claims.
    """
    configure_logging(log_level or os.environ.get(LOG_LEVEL_ENV) or "WARNING")
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(
            Path(config_path) if config_path else None,
            repository_kind=repository_kind.lower() if repository_kind else None,
            repository_root=repository_root,
            registry_root=registry_root,
            signer_uid=signer_uid,
        )
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ERROR)


# Register all subcommands
cli.add_command(hash_command)
cli.add_command(sign_command)
cli.add_command(verify_command)
cli.add_command(revoke_command)
cli.add_command(claims_command)
cli.add_command(check_command)
