"""Typed configuration loading and access.

This module provides dataclasses for the config.toml structure with
full type safety and validation.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "AccountConfig",
    "AppsConfig",
    "OutputConfig",
    "StoreConfig",
    "ConfigError",
    "OutputFormat",
    "load_config",
    "load_config_or_default",
    "resolve_config_path",
    "resolve_store_path",
    "CONFIG_ENV",
    "STORE_ENV",
    "DEFAULT_DEPLOYMENTS",
]

CONFIG_ENV = "OTACTL_CONFIG"
STORE_ENV = "OTACTL_STORE"

DEFAULT_CONFIG_PATH = Path("~/.config/otactl/config.toml")
DEFAULT_STORE_PATH = "~/.local/share/otactl/store.json"
DEFAULT_ACCOUNT = "me@localhost"
DEFAULT_DEPLOYMENTS: tuple[str, ...] = ("Staging", "Production")

OutputFormat = Literal["table", "json"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class AccountConfig:
    """Identity of the account running the CLI (owner of the apps it creates)."""

    email: str = DEFAULT_ACCOUNT


@dataclass(frozen=True, slots=True)
class StoreConfig:
    path: str = DEFAULT_STORE_PATH


@dataclass(frozen=True, slots=True)
class AppsConfig:
    """Defaults applied when an app is created."""

    default_deployments: tuple[str, ...] = DEFAULT_DEPLOYMENTS


@dataclass(frozen=True, slots=True)
class OutputConfig:
    format: OutputFormat = "table"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    account: AccountConfig = field(default_factory=AccountConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    apps: AppsConfig = field(default_factory=AppsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: if a value has the right type but an unusable content.
        """
        account: StrDict = get_table(data, "account") or {}
        store: StrDict = get_table(data, "store") or {}
        apps: StrDict = get_table(data, "apps") or {}
        output: StrDict = get_table(data, "output") or {}

        fmt = get_str(output, "format") or "table"
        if fmt not in ("table", "json"):
            raise ValueError(f"output.format must be 'table' or 'json', got {fmt!r}")

        deployments = get_str_list(apps, "default_deployments")
        if deployments is not None and len(set(deployments)) != len(deployments):
            raise ValueError("apps.default_deployments contains duplicate names")

        return cls(
            account=AccountConfig(email=get_str(account, "email") or DEFAULT_ACCOUNT),
            store=StoreConfig(path=get_str(store, "path") or DEFAULT_STORE_PATH),
            apps=AppsConfig(
                default_deployments=tuple(deployments)
                if deployments is not None
                else DEFAULT_DEPLOYMENTS
            ),
            output=OutputConfig(format="json" if fmt == "json" else "table"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = Config.from_dict(result.value)
        return Ok(config)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config, treating a missing file as the default config.

    A file that exists but does not parse is still an error: silently falling
    back would point the CLI at a different store than the user configured.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def resolve_config_path(explicit: Path | None = None) -> Path:
    """Config lookup order: explicit path, $OTACTL_CONFIG, the user default."""
    if explicit is not None:
        return explicit.expanduser()
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def resolve_store_path(config: Config) -> Path:
    """$OTACTL_STORE wins over ``store.path`` from the config."""
    env = os.environ.get(STORE_ENV)
    raw = env if env else config.store.path
    return Path(os.path.expandvars(raw)).expanduser()
