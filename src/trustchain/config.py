"""trustchain configuration.

Configuration is an explicit ``TrustChainConfig`` passed to every
component at construction; nothing in the core reads global state.

``load_config`` builds one in layers, later layers winning:

1. Built-in defaults.
2. A YAML file: the ``path`` argument, else ``$TRUSTCHAIN_CONFIG``, else
   ``~/.trust-chain-checker/config.yaml`` if it exists.
3. ``TRUSTCHAIN_*`` environment variables.

Example file::

    registry_root: ~/.trust-chain-checker/registry
    repository_root: ~/.m2/repository
    repository_kind: maven
    signer_uid: alice@example.com
    signing_timeout: 30
    pass_threshold: 0.5
    policy: signer-weights
    policy_options:
      weights:
        0123456789ABCDEF0123456789ABCDEF01234567: 0.8
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from trustchain.core.artifacts.backends import DECLARED_KINDS, default_backends
from trustchain.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_HOME: Path = Path("~/.trust-chain-checker")
DEFAULT_CONFIG_FILE: Path = DEFAULT_HOME / "config.yaml"

ENV_PREFIX: str = "TRUSTCHAIN_"

# Environment variable suffix -> config field.
_ENV_FIELDS: dict[str, str] = {
    "REGISTRY": "registry_root",
    "REPOSITORY": "repository_root",
    "REPOSITORY_KIND": "repository_kind",
    "SIGNER": "signer_uid",
    "GPG": "gpg_program",
    "GPG_HOMEDIR": "gpg_homedir",
    "SIGNING_TIMEOUT": "signing_timeout",
    "STAGING_DIR": "staging_dir",
    "MAX_CLAIM_SIZE": "max_claim_size",
    "PASS_THRESHOLD": "pass_threshold",
    "POLICY": "policy",
}

_PATH_FIELDS = frozenset({"registry_root", "repository_root", "gpg_homedir", "staging_dir"})


@dataclass(frozen=True)
class TrustChainConfig:
    """Resolved configuration.

    Attributes:
        registry_root: Root folder of the claim registry.
        repository_root: Root of the local artifact repository.
        repository_kind: Repository layout ("maven").
        signer_uid: Signer identity for new claims (gpg ``--local-user``).
        gpg_program: Signing engine executable.
        gpg_homedir: Optional keyring directory for the engine.
        signing_timeout: Seconds before an engine call is abandoned.
        staging_dir: Staging folder for claims being signed. None means
            the system temporary directory.
        max_claim_size: Largest claim document in bytes.
        pass_threshold: Trust level an artifact needs to pass a check.
        policy: Trust policy name.
        policy_options: Keyword options for the trust policy.
    """

    registry_root: Path = DEFAULT_HOME / "registry"
    repository_root: Path = Path("~/.m2/repository")
    repository_kind: str = "maven"
    signer_uid: str | None = None
    gpg_program: str = "gpg"
    gpg_homedir: Path | None = None
    signing_timeout: float = 60.0
    staging_dir: Path | None = None
    max_claim_size: int = 65536
    pass_threshold: float = 0.5
    policy: str = "distinct-kinds"
    policy_options: dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range.

        Raises:
            ConfigError: On an unknown repository kind, a threshold outside
                [0, 1], or a non-positive timeout or size limit.
        """
        kind = self.repository_kind.lower()
        if kind not in default_backends().kinds and kind not in DECLARED_KINDS:
            raise ConfigError(
                f"unknown repository kind '{self.repository_kind}'",
                subject="repository_kind",
            )
        if not 0.0 <= self.pass_threshold <= 1.0:
            raise ConfigError(
                f"pass_threshold must be in [0, 1], got {self.pass_threshold}",
                subject="pass_threshold",
            )
        if self.signing_timeout <= 0:
            raise ConfigError(
                f"signing_timeout must be positive, got {self.signing_timeout}",
                subject="signing_timeout",
            )
        if self.max_claim_size <= 0:
            raise ConfigError(
                f"max_claim_size must be positive, got {self.max_claim_size}",
                subject="max_claim_size",
            )
        if not isinstance(self.policy_options, dict):
            raise ConfigError("policy_options must be a mapping", subject="policy_options")


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw file or environment value to the field's type."""
    if value is None:
        return None
    try:
        if name in _PATH_FIELDS:
            return Path(os.path.expanduser(str(value)))
        if name in ("signing_timeout", "pass_threshold"):
            return float(value)
        if name == "max_claim_size":
            return int(value)
        if name == "policy_options":
            return dict(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"invalid value for '{name}': {value!r}", subject=name, cause=exc
        ) from exc
    return str(value)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file '{path}'", subject=path, cause=exc) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in '{path}'", subject=path, cause=exc) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file '{path}' must contain a mapping", subject=path)
    return data


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> TrustChainConfig:
    """Load configuration from defaults, a YAML file, and the environment.

    Args:
        path: Explicit config file. Must exist if given.
        environ: Environment mapping. Defaults to ``os.environ``.
        **overrides: Field values applied last (e.g. from CLI options);
            None values are ignored.

    Returns:
        A validated ``TrustChainConfig``.

    Raises:
        ConfigError: On unreadable files, unknown keys, or invalid values.
    """
    env = os.environ if environ is None else environ
    known = {f.name for f in fields(TrustChainConfig)}
    values: dict[str, Any] = {}

    config_file = path
    if config_file is None and env.get(f"{ENV_PREFIX}CONFIG"):
        config_file = Path(env[f"{ENV_PREFIX}CONFIG"])
    if config_file is None:
        default_file = Path(os.path.expanduser(str(DEFAULT_CONFIG_FILE)))
        if default_file.is_file():
            config_file = default_file

    if config_file is not None:
        logger.debug("loading configuration from %s", config_file)
        for key, value in _read_yaml(Path(config_file)).items():
            if key not in known:
                raise ConfigError(f"unknown configuration key '{key}'", subject=key)
            values[key] = value

    for suffix, name in _ENV_FIELDS.items():
        raw = env.get(f"{ENV_PREFIX}{suffix}")
        if raw:
            values[name] = raw

    for key, value in overrides.items():
        if key not in known:
            raise ConfigError(f"unknown configuration key '{key}'", subject=key)
        if value is not None:
            values[key] = value

    config = replace(
        TrustChainConfig(),
        **{name: _coerce(name, value) for name, value in values.items()},
    )
    config = replace(
        config,
        registry_root=Path(os.path.expanduser(str(config.registry_root))),
        repository_root=Path(os.path.expanduser(str(config.repository_root))),
    )
    config.validate()
    return config
