"""Shared fixtures for CLI tests.

Commands run through ``CliRunner`` with an explicit ``--config`` file and
the fake signature engine injected through the Click context object, so
no gpg keyring is touched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest
from click.testing import CliRunner, Result

from trustchain.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def invoke(runner: CliRunner, config_file: Path, fake_engine) -> Callable[..., Result]:
    """Invoke ``trustchain --config <tmp config> <args>`` with the fake engine."""

    def _invoke(*args: str) -> Result:
        return runner.invoke(
            cli, ["--config", str(config_file), *args], obj={"engine": fake_engine}
        )

    return _invoke


@pytest.fixture
def invoke_json(invoke: Callable[..., Result]) -> Callable[..., tuple[int, Any]]:
    """Invoke a command with ``--format json`` and parse its output."""

    def _invoke_json(*args: str) -> tuple[int, Any]:
        result = invoke(*args, "--format", "json")
        return result.exit_code, json.loads(result.output)

    return _invoke_json
