"""Configuration loader for the feed checker."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, replace
from pathlib import Path

import yaml

DEFAULT_USER_AGENT = "feed-checker/0.3 (feed auditor)"

CONFIG_ENV_VAR = "FEED_CHECKER_CONFIG"


@dataclass(frozen=True)
class CheckConfig:
    timeout: float = 60.0  # seconds per request
    max_age_days: int = 365
    parallelism: int = 5
    user_agent: str = DEFAULT_USER_AGENT

    def validate(self) -> CheckConfig:
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ValueError(f"timeout must be a finite number greater than zero, got {self.timeout}")
        if self.max_age_days < 0:
            raise ValueError(f"age must not be negative, got {self.max_age_days}")
        if self.parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {self.parallelism}")
        return self


def load_config(config_path: str | None = None) -> CheckConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file. If None, uses the
                     FEED_CHECKER_CONFIG env var; if that is unset too,
                     the defaults are returned.

    Returns:
        Validated CheckConfig
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)
    if not config_path:
        return CheckConfig()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return _parse_config(data or {})


def _parse_config(data: dict) -> CheckConfig:
    """Parse config dictionary into CheckConfig object."""
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping")

    defaults = CheckConfig()
    try:
        config = CheckConfig(
            timeout=float(data.get("timeout", defaults.timeout)),
            max_age_days=int(data.get("age", defaults.max_age_days)),
            parallelism=int(data.get("parallelism", defaults.parallelism)),
            user_agent=str(data.get("user_agent", defaults.user_agent)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid config value: {e}") from e
    return config.validate()


def apply_overrides(
    config: CheckConfig,
    timeout: float | None = None,
    age: int | None = None,
    parallelism: int | None = None,
) -> CheckConfig:
    """Return a copy of `config` with every non-None override applied."""
    changes = {}
    if timeout is not None:
        changes["timeout"] = timeout
    if age is not None:
        changes["max_age_days"] = age
    if parallelism is not None:
        changes["parallelism"] = parallelism
    return replace(config, **changes).validate()
