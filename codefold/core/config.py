"""
Run settings for Codefold.

Loaded in layers, later ones winning:
1. Defaults (this file)
2. Config file (~/.config/codefold/config.toml, or $CODEFOLD_CONFIG)
3. Environment variables (CODEFOLD_*)
4. Explicit overrides (CLI flags, test code)

The profit policy name is resolved once, when Settings is built, so an
unknown name fails before any tree is traversed.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from codefold.core.exceptions import ConfigurationError
from codefold.core.models import ProfitFunction

logger = logging.getLogger(__name__)

UNFOLDED_PROFIT_MODES = ("courtesy", "suppress")


@dataclass(frozen=True)
class Settings:
    """Settings consulted by the cost/profit passes.

    Immutable. Derive changed settings with ``dataclasses.replace``, which
    resolves the profit function again.
    """

    profit_type: str = "NoContentModel"
    cur_proj: str = ""
    # What unfolded nodes report as profit: "courtesy" (0.0) or "suppress" (None)
    unfolded_profit: str = "courtesy"
    profit_function: ProfitFunction = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "profit_function", ProfitFunction.parse(self.profit_type))
        mode = self.unfolded_profit.lower()
        if mode not in UNFOLDED_PROFIT_MODES:
            raise ConfigurationError(
                f"unfolded_profit must be one of {UNFOLDED_PROFIT_MODES}, got {mode!r}"
            )
        object.__setattr__(self, "unfolded_profit", mode)


_ENV_MAP: dict[str, str] = {
    "CODEFOLD_PROFIT_TYPE": "profit_type",
    "CODEFOLD_PROJECT": "cur_proj",
    "CODEFOLD_UNFOLDED_PROFIT": "unfolded_profit",
}


def get_config_path() -> Path:
    """Get config file path, respecting $CODEFOLD_CONFIG and XDG."""
    explicit = os.environ.get("CODEFOLD_CONFIG")
    if explicit:
        return Path(explicit)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "codefold" / "config.toml"
    return Path.home() / ".config" / "codefold" / "config.toml"


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Cannot read config {path}: {e}") from e

    section = data.get("codefold", {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[codefold] in {path} must be a table")

    known = {f.name for f in fields(Settings) if f.init}
    unknown = set(section) - known
    if unknown:
        raise ConfigurationError(f"Unknown settings in {path}: {', '.join(sorted(unknown))}")
    return {key: str(value) for key, value in section.items()}


def load_settings(path: Path | None = None, **overrides: str | None) -> Settings:
    """Build Settings from file, environment and explicit overrides.

    Overrides whose value is None are ignored, so CLI options can be
    passed straight through.
    """
    values: dict[str, str] = {}

    config_path = path or get_config_path()
    if config_path.exists():
        values.update(_read_toml(config_path))
        logger.debug("Loaded settings from %s", config_path)
    elif path is not None:
        raise ConfigurationError(f"Config file not found: {path}")

    for env_key, attr in _ENV_MAP.items():
        val = os.environ.get(env_key)
        if val is not None:
            values[attr] = val

    values.update({k: v for k, v in overrides.items() if v is not None})

    settings = Settings(**values)
    logger.debug("Using profit function %s", settings.profit_function)
    return settings
