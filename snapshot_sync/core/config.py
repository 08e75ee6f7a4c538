"""
Configuration management for snapshot-sync.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml, and persisting the
shared sync location once the user has chosen it.

The configuration file contains:
    - Output directory for the local database and log files
    - Shared sync directory holding the snapshot document (optional)
    - Snapshot file name
    - How long teardown may wait for the final export

Configuration File Location:
    By default config.yaml is read from the current working directory.
    Every entry point also accepts an explicit path.

Example config.yaml:
    output:
      directory: "~/.local/share/snapshot-sync"

    sync:
      directory: "~/Sync/video-library"   # null until a location is chosen
      filename: "libretube_autosync.json"
      exit_timeout: 10
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from snapshot_sync.core.exceptions import ConfigError


# Default configuration file name (always in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_SNAPSHOT_FILENAME = "libretube_autosync.json"
DEFAULT_EXIT_TIMEOUT = 10.0


@dataclass(frozen=True)
class OutputConfig:
    """
    Output directory configuration.

    Attributes:
        directory: Absolute path holding database.db and the logs/ folder.
                   Path expansion is performed (~ is expanded to home directory).
    """
    directory: Path


@dataclass(frozen=True)
class SyncConfig:
    """
    Shared snapshot location configuration.

    Attributes:
        directory: Folder shared between devices, or None when no location
                   has been chosen yet. Export and import are skipped while
                   this is None.
        filename: Name of the snapshot document inside the directory.
        exit_timeout: Seconds teardown waits for the final export to finish.
    """
    directory: Path | None
    filename: str = DEFAULT_SNAPSHOT_FILENAME
    exit_timeout: float = DEFAULT_EXIT_TIMEOUT


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Example:
        config = load_config()
        print(f"Database in: {config.output.directory}")
        print(f"Snapshot in: {config.sync.directory}")
    """
    output: OutputConfig
    sync: SyncConfig
    path: Path


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing the output section, or contains invalid values.
    """
    config_path = _resolve_config_path(config_path)
    raw_config = _read_raw_config(config_path)

    if "output" not in raw_config:
        raise ConfigError(
            "Missing required section 'output' in config.yaml",
            details={"missing_section": "output"}
        )

    output_config = _parse_output_config(raw_config["output"])
    sync_config = _parse_sync_config(raw_config.get("sync"))

    return Config(output=output_config, sync=sync_config, path=config_path)


def save_sync_directory(directory: Path, config_path: Path | None = None) -> Config:
    """
    Persist a new shared sync directory in config.yaml.

    All other settings in the file are preserved. The directory must already
    exist; it is stored in expanded, absolute form.

    Args:
        directory: The folder that will hold the snapshot document.
        config_path: Optional explicit path to config file.

    Returns:
        Config: The configuration as reloaded after the change.

    Raises:
        ConfigError: If the directory does not exist or the file cannot be
                     read or written.
    """
    config_path = _resolve_config_path(config_path)
    target = Path(directory).expanduser().resolve()

    if not target.is_dir():
        raise ConfigError(
            f"Sync directory does not exist: {target}",
            details={"field": "sync.directory", "path": str(target)}
        )

    raw_config = _read_raw_config(config_path)
    sync_section = raw_config.get("sync") or {}
    if not isinstance(sync_section, dict):
        raise ConfigError(
            "Section 'sync' must be a dictionary",
            details={"section": "sync"}
        )
    sync_section["directory"] = str(target)
    raw_config["sync"] = sync_section

    try:
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(raw_config, f, sort_keys=False)
    except OSError as e:
        raise ConfigError(
            f"Failed to write configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    return load_config(config_path)


def _resolve_config_path(config_path: Path | None) -> Path:
    if config_path is None:
        return Path.cwd() / CONFIG_FILENAME
    return Path(config_path)


def _read_raw_config(config_path: Path) -> dict[str, Any]:
    """Read config.yaml and return its top-level mapping."""
    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _parse_output_config(output_section: Any) -> OutputConfig:
    """
    Parse and validate the output configuration section.

    Expands ~ to home directory and converts to absolute Path.
    Does NOT create the directory (the CLI does that at startup).
    """
    if not isinstance(output_section, dict):
        raise ConfigError(
            "Section 'output' must be a dictionary",
            details={"section": "output"}
        )

    directory = output_section.get("directory", "")

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.directory' must be a non-empty string",
            details={"field": "output.directory"}
        )

    return OutputConfig(directory=Path(directory.strip()).expanduser().resolve())


def _parse_sync_config(sync_section: Any) -> SyncConfig:
    """
    Parse and validate the sync configuration section.

    Applies defaults if section is missing or fields are not specified.
    The directory is not checked for existence here: a missing folder is
    reported as a skipped sync at run time, not as a configuration error.
    """
    if sync_section is None:
        return SyncConfig(directory=None)

    if not isinstance(sync_section, dict):
        raise ConfigError(
            "Section 'sync' must be a dictionary",
            details={"section": "sync"}
        )

    directory = None
    raw_directory = sync_section.get("directory")
    if raw_directory is not None:
        if not isinstance(raw_directory, str):
            raise ConfigError(
                "'sync.directory' must be a string path or null",
                details={"field": "sync.directory"}
            )
        if raw_directory.strip():
            directory = Path(raw_directory.strip()).expanduser().resolve()

    filename = sync_section.get("filename", DEFAULT_SNAPSHOT_FILENAME)
    if not isinstance(filename, str) or not filename.strip() or "/" in filename or "\\" in filename:
        raise ConfigError(
            "'sync.filename' must be a plain file name",
            details={"field": "sync.filename", "value": filename}
        )

    exit_timeout = sync_section.get("exit_timeout", DEFAULT_EXIT_TIMEOUT)
    if isinstance(exit_timeout, bool) or not isinstance(exit_timeout, (int, float)) or exit_timeout <= 0:
        raise ConfigError(
            "'sync.exit_timeout' must be a positive number of seconds",
            details={"field": "sync.exit_timeout", "value": exit_timeout}
        )

    return SyncConfig(
        directory=directory,
        filename=filename.strip(),
        exit_timeout=float(exit_timeout)
    )
