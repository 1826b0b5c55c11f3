"""Tests for layered configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from trustchain.config import TrustChainConfig, load_config
from trustchain.exceptions import ConfigError, ErrorKind


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``~`` at an empty directory so no user config is picked up."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestDefaults:
    """Tests for built-in defaults."""

    def test_defaults_without_file(self, isolated_home: Path) -> None:
        config = load_config(environ={})
        assert config.repository_kind == "maven"
        assert config.pass_threshold == 0.5
        assert config.policy == "distinct-kinds"
        assert config.registry_root == isolated_home / ".trust-chain-checker" / "registry"
        assert config.repository_root == isolated_home / ".m2" / "repository"
        assert config.signer_uid is None

    def test_default_file_in_home(self, isolated_home: Path) -> None:
        home_dir = isolated_home / ".trust-chain-checker"
        home_dir.mkdir()
        _write(home_dir / "config.yaml", "signer_uid: carol@example.com\n")
        assert load_config(environ={}).signer_uid == "carol@example.com"


class TestYamlFile:
    """Tests for the YAML layer."""

    def test_reads_values(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "c.yaml", (
            "registry_root: ~/claims\n"
            "signer_uid: alice@example.com\n"
            "signing_timeout: 5\n"
            "max_claim_size: 1024\n"
            "pass_threshold: 0.75\n"
            "policy: signer-weights\n"
            "policy_options:\n"
            "  default_weight: 0.2\n"
        ))
        config = load_config(path, environ={})
        assert config.registry_root == Path("~/claims").expanduser()
        assert config.signer_uid == "alice@example.com"
        assert config.signing_timeout == 5.0
        assert config.max_claim_size == 1024
        assert config.pass_threshold == 0.75
        assert config.policy_options == {"default_weight": 0.2}

    def test_empty_file(self, tmp_path: Path) -> None:
        assert load_config(_write(tmp_path / "c.yaml", ""), environ={}) == load_config(environ={})

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "c.yaml", "colour: blue\n")
        with pytest.raises(ConfigError, match="unknown configuration key") as exc_info:
            load_config(path, environ={})
        assert exc_info.value.kind is ErrorKind.CONFIG

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(_write(tmp_path / "c.yaml", "a: [1, 2\n"), environ={})

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            load_config(_write(tmp_path / "c.yaml", "- a\n- b\n"), environ={})

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "absent.yaml", environ={})


class TestLayering:
    """Tests for file < environment < overrides precedence."""

    def test_environment_beats_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "c.yaml", "signer_uid: file@example.com\n")
        config = load_config(path, environ={"TRUSTCHAIN_SIGNER": "env@example.com"})
        assert config.signer_uid == "env@example.com"

    def test_overrides_beat_environment(self) -> None:
        config = load_config(
            environ={"TRUSTCHAIN_SIGNER": "env@example.com"},
            signer_uid="cli@example.com",
        )
        assert config.signer_uid == "cli@example.com"

    def test_none_overrides_ignored(self) -> None:
        config = load_config(environ={"TRUSTCHAIN_SIGNER": "env@example.com"}, signer_uid=None)
        assert config.signer_uid == "env@example.com"

    def test_config_file_from_environment(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "c.yaml", "pass_threshold: 0.9\n")
        config = load_config(environ={"TRUSTCHAIN_CONFIG": str(path)})
        assert config.pass_threshold == 0.9

    def test_environment_values_are_coerced(self, tmp_path: Path) -> None:
        config = load_config(environ={
            "TRUSTCHAIN_PASS_THRESHOLD": "0.25",
            "TRUSTCHAIN_MAX_CLAIM_SIZE": "4096",
            "TRUSTCHAIN_REGISTRY": str(tmp_path / "reg"),
        })
        assert config.pass_threshold == 0.25
        assert config.max_claim_size == 4096
        assert config.registry_root == tmp_path / "reg"

    def test_unknown_override(self) -> None:
        with pytest.raises(ConfigError):
            load_config(environ={}, colour="blue")


class TestValidation:
    """Tests for rejected values."""

    @pytest.mark.parametrize("env", [
        {"TRUSTCHAIN_PASS_THRESHOLD": "1.5"},
        {"TRUSTCHAIN_PASS_THRESHOLD": "high"},
        {"TRUSTCHAIN_SIGNING_TIMEOUT": "0"},
        {"TRUSTCHAIN_MAX_CLAIM_SIZE": "-1"},
        {"TRUSTCHAIN_REPOSITORY_KIND": "gradle"},
    ])
    def test_invalid_values(self, env: dict[str, str]) -> None:
        with pytest.raises(ConfigError):
            load_config(environ=env)

    def test_declared_kind_accepted(self) -> None:
        """npm is a known name; the failure comes when a backend is built."""
        assert load_config(environ={"TRUSTCHAIN_REPOSITORY_KIND": "npm"}).repository_kind == "npm"

    def test_validate_direct(self) -> None:
        with pytest.raises(ConfigError):
            TrustChainConfig(pass_threshold=-0.1).validate()
