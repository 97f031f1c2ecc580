"""Configuration loading for mdvault.

Settings live in a small YAML file::

    root_path: ~/notes
    ignore: [.obsidian, .trash, templates]
    private:
      include: false
      icon: "🔒"
    strict: true
    log_level: INFO

:func:`load_config` turns it into a frozen :class:`VaultConfig`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mdvault.errors import ConfigurationError

#: Environment variable holding the default config path for the CLI.
CONFIG_ENV_VAR = "MDVAULT_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_IGNORE = (".obsidian", ".mobile", ".output", ".trash", "templates")
DEFAULT_PRIVATE_ICON = "🔒"


@dataclass(frozen=True)
class PrivatePolicy:
    """Whether private notes/links may be exposed, and how masked links look."""

    include: bool = False
    icon: str = DEFAULT_PRIVATE_ICON

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PrivatePolicy":
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError("'private' must be a mapping")
        include = data.get("include", False)
        if not isinstance(include, bool):
            raise ConfigurationError("'private.include' must be a boolean")
        return cls(include=include, icon=str(data.get("icon", DEFAULT_PRIVATE_ICON)))


@dataclass(frozen=True)
class VaultConfig:
    root_path: Path
    ignore: tuple[str, ...] = DEFAULT_IGNORE
    private: PrivatePolicy = field(default_factory=PrivatePolicy)
    #: Abort on the first document that fails to transform.
    strict: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, base_dir: Path | None = None) -> "VaultConfig":
        if "root_path" not in data or not data["root_path"]:
            raise ConfigurationError("'root_path' is required")

        root = Path(str(data["root_path"])).expanduser()
        if not root.is_absolute() and base_dir is not None:
            root = base_dir / root
        if not root.is_dir():
            raise ConfigurationError(f"Root path '{root}' is not a valid directory")

        ignore = data.get("ignore", list(DEFAULT_IGNORE))
        if ignore is None:
            ignore = []
        if isinstance(ignore, str) or not isinstance(ignore, list):
            raise ConfigurationError("'ignore' must be a list of directory names")

        strict = data.get("strict", True)
        if not isinstance(strict, bool):
            raise ConfigurationError("'strict' must be a boolean")

        return cls(
            root_path=root.resolve(),
            ignore=tuple(str(i) for i in ignore),
            private=PrivatePolicy.from_dict(data.get("private")),
            strict=strict,
            log_level=str(data.get("log_level", "INFO")),
        )


def load_config(path: Path | str) -> VaultConfig:
    """Read and validate a YAML config file.

    Relative ``root_path`` values are resolved against the config file's
    directory.  Raises :class:`ConfigurationError` for anything unusable.
    """
    path = Path(path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file '{path}': {exc}") from exc

    if not text.strip():
        raise ConfigurationError(f"The config file '{path}' is empty")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in config file '{path}': {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{path}' must contain a mapping")

    return VaultConfig.from_dict(data, base_dir=path.parent)


def default_config_path() -> Path:
    return Path(os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure root logging and return the package logger."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )
    return logging.getLogger("mdvault")
