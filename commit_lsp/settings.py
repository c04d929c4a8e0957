"""Runtime settings from the environment and the two layers of config files."""

import os
from functools import lru_cache
from pathlib import Path

import tomlkit
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from tomlkit.exceptions import TOMLKitError

from commit_lsp.errors import ConfigError
from commit_lsp.models import ConfigFile

REPO_CONFIG_NAME = ".commit-lsp.toml"


class CommitLspSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COMMIT_LSP_",
        extra="ignore",
    )

    remote: str = "origin"  # git remote whose URL selects the tracker
    http_timeout: float = 10.0
    credentials_timeout: float = 30.0

    log_level: str = "INFO"
    log_file: Path | None = None  # stderr when unset

    user_config: Path | None = None  # overrides the XDG location


@lru_cache(maxsize=1)
def get_settings() -> CommitLspSettings:
    return CommitLspSettings()


def user_config_path(settings: CommitLspSettings) -> Path:
    """Return the user-level config path, respecting XDG_CONFIG_HOME."""
    if settings.user_config:
        return settings.user_config.expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "commit-lsp" / "config.toml"


def repo_config_path(root: Path) -> Path:
    return root / REPO_CONFIG_NAME


def load_config_file(path: Path) -> ConfigFile:
    """Load one config layer, returning an empty config if the file is missing.

    Raises ConfigError if the file exists but is not valid TOML or does not
    match the expected shape.
    """
    if not path.exists():
        return ConfigFile()
    try:
        with path.open(encoding="utf-8") as fh:
            doc = tomlkit.load(fh)
    except (OSError, TOMLKitError) as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    try:
        return ConfigFile.model_validate(doc.unwrap())
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}: {exc}") from exc
