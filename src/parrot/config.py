"""Configuration management using TOML + environment variables."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

CONFIG_DIR = Path.home() / ".parrot"
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass
class StorageConfig:
    path: str = ".parrot"


@dataclass
class ShellConfig:
    executable: str = "/bin/sh"


@dataclass
class EditorConfig:
    command: str = ""


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    file: str = "~/.parrot/parrot.log"


@dataclass
class AppConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def ensure_config_dir() -> None:
    """Create config directory with secure permissions."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    os.chmod(CONFIG_DIR, 0o700)


def load_config() -> AppConfig:
    """Load configuration from TOML file with env var overrides."""
    config = AppConfig()

    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "rb") as f:
            data = tomllib.load(f)

        storage = data.get("storage", {})
        config.storage.path = storage.get("path", config.storage.path)

        shell = data.get("shell", {})
        config.shell.executable = shell.get("executable", config.shell.executable)

        editor = data.get("editor", {})
        config.editor.command = editor.get("command", config.editor.command)

        logging_cfg = data.get("logging", {})
        config.logging.level = logging_cfg.get("level", config.logging.level)
        config.logging.file = logging_cfg.get("file", config.logging.file)

    # Environment variable overrides
    if env_path := os.environ.get("PARROT_PATH"):
        config.storage.path = env_path
    if env_shell := os.environ.get("PARROT_SHELL"):
        config.shell.executable = env_shell
    if env_editor := os.environ.get("PARROT_EDITOR"):
        config.editor.command = env_editor
    if env_log_level := os.environ.get("PARROT_LOG_LEVEL"):
        config.logging.level = env_log_level
    if env_log_file := os.environ.get("PARROT_LOG_FILE"):
        config.logging.file = env_log_file

    return config


def save_config(config: AppConfig) -> None:
    """Save configuration to TOML file."""
    ensure_config_dir()

    data = {
        "storage": {
            "path": config.storage.path,
        },
        "shell": {
            "executable": config.shell.executable,
        },
        "editor": {
            "command": config.editor.command,
        },
        "logging": {
            "level": config.logging.level,
            "file": config.logging.file,
        },
    }

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(data, f)

    os.chmod(CONFIG_FILE, 0o600)


# Global singleton
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or load the global config singleton."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global config (for testing)."""
    global _config
    _config = None
