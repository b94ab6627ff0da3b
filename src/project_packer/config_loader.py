"""
Configuration file loader for project-packer.

Supports loading configuration from:
- project-packer.toml / .project-packer.toml / packer.toml / .packer.toml
- packer.yml / .packer.yml / packer.yaml / .packer.yaml

CLI flags override config file values.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import DEFAULT_MAX_FILE_BYTES
from .errors import ConfigError

logger = logging.getLogger(__name__)

# Optional runtime modules (loaded via importlib); typed as Any to avoid stub issues.
tomllib: Any | None
yaml: Any | None

try:
    import tomllib as _tomllib  # Python 3.11+
except ImportError:
    try:
        _tomllib = importlib.import_module("tomli")
    except ImportError:
        _tomllib = None
tomllib = _tomllib

try:
    yaml = importlib.import_module("yaml")
except ImportError:
    yaml = None


# Config file search order (first found wins)
CONFIG_FILE_NAMES = [
    "project-packer.toml",
    ".project-packer.toml",
    "packer.toml",
    ".packer.toml",
    "packer.yml",
    ".packer.yml",
    "packer.yaml",
    ".packer.yaml",
]

# Accepted top-level section names for nested configs
_SECTION_NAMES = ("project-packer", "packer")


@dataclass
class ProjectConfig:
    """
    Project-level configuration loaded from config files.

    All fields are optional - CLI flags will override any values set here.
    """

    # File filtering
    extra_ignore_dirs: set[str] | None = None
    extra_ignore_suffixes: set[str] | None = None
    exclude_globs: set[str] | None = None
    max_file_bytes: int | None = None

    # Behavior options
    respect_ignore_file: bool | None = None
    include_root_name: bool | None = None

    # Output options
    output_dir: Path | None = None


def find_config_file(root: Path) -> Path | None:
    """
    Find a configuration file in a directory.

    Args:
        root: Directory to search (not recursive)

    Returns:
        Path to the config file, or None if not found
    """
    for name in CONFIG_FILE_NAMES:
        config_path = root / name
        if config_path.is_file():
            return config_path
    return None


def _select_section(data: dict[str, Any]) -> dict[str, Any]:
    for name in _SECTION_NAMES:
        if name in data and isinstance(data[name], dict):
            return dict(data[name])
    return data


def _parse_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML config file into a dict.

    Raises:
        ImportError: If TOML parsing support is unavailable.
    """
    if tomllib is None:
        raise ImportError(
            "TOML support requires 'tomli' package (Python < 3.11) or Python 3.11+. "
            "Install with: pip install tomli"
        )

    with open(path, "rb") as f:
        data: dict[str, Any] = tomllib.load(f)
    return _select_section(data)


def _parse_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a dict.

    Raises:
        ImportError: If PyYAML is not installed.
    """
    if yaml is None:
        raise ImportError(
            "YAML support requires 'pyyaml' package. Install with: pip install pyyaml"
        )

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        return {}
    return _select_section(dict(raw_data))


def _normalize_names(values: Any) -> set[str] | None:
    """Normalize a comma-separated string or list into a set of names."""
    if values is None:
        return None

    if isinstance(values, str):
        values = values.split(",")

    if not isinstance(values, (list, set, tuple)):
        return None

    result = {str(v).strip() for v in values if str(v).strip()}
    return result if result else None


def _normalize_suffixes(values: Any) -> set[str] | None:
    """Normalize suffixes to lowercase; a bare word like `log` becomes `.log`."""
    names = _normalize_names(values)
    if names is None:
        return None
    return {
        (name if name.startswith(".") or "." in name else f".{name}").lower()
        for name in names
    }


def load_config(root: Path, config_path: Path | None = None) -> ProjectConfig:
    """
    Load configuration from a config file.

    Args:
        root: Directory searched for a config file
        config_path: Explicit path to config file (optional)

    Returns:
        ProjectConfig with loaded values (unset values remain None).

    Raises:
        ConfigError: If an explicit `config_path` does not exist or has an
            unsupported extension
    """
    if config_path is not None and not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    explicit = config_path is not None
    if config_path is None:
        config_path = find_config_file(root)

    if config_path is None:
        return ProjectConfig()

    suffix = config_path.suffix.lower()
    try:
        if suffix == ".toml":
            data = _parse_toml(config_path)
        elif suffix in (".yml", ".yaml"):
            data = _parse_yaml(config_path)
        elif explicit:
            raise ConfigError(f"Unsupported config file type: {config_path.name}")
        else:
            return ProjectConfig()
    except ConfigError:
        raise
    except Exception as e:
        # A broken config file should not stop packing
        logger.warning("Ignoring unreadable config file %s: %s", config_path, e)
        return ProjectConfig()

    logger.debug("Loaded config from %s", config_path)
    config = ProjectConfig()

    config.extra_ignore_dirs = _normalize_names(
        data.get("extra_ignore_dirs") or data.get("ignore_dirs")
    )
    config.extra_ignore_suffixes = _normalize_suffixes(
        data.get("extra_ignore_suffixes") or data.get("ignore_suffixes")
    )
    config.exclude_globs = _normalize_names(data.get("exclude_globs") or data.get("exclude_glob"))

    if "max_file_bytes" in data:
        config.max_file_bytes = int(data["max_file_bytes"])
    if "respect_ignore_file" in data:
        config.respect_ignore_file = bool(data["respect_ignore_file"])
    if "include_root_name" in data:
        config.include_root_name = bool(data["include_root_name"])
    if "output_dir" in data:
        # Relative to the directory holding the config file
        config.output_dir = config_path.parent / Path(data["output_dir"])

    return config


def merge_cli_with_config(
    config: ProjectConfig,
    *,
    # CLI arguments (None means not specified on CLI)
    exclude_glob: str | None = None,
    max_file_bytes: int | None = None,
    output_dir: Path | None = None,
    no_ignore_file: bool = False,
    no_root_name: bool = False,
) -> dict[str, Any]:
    """Merge CLI arguments with config file values (CLI wins).

    Args:
        config: Config loaded from file (may have unset values).
        exclude_glob: Comma-separated exclude globs from CLI (optional).
        max_file_bytes: CLI override for the size ceiling (optional).
        output_dir: CLI override for output directory (optional).
        no_ignore_file: CLI flag to skip the root ignore file.
        no_root_name: CLI flag to drop the folder-name prefix from paths.

    Returns:
        Keyword arguments for `Config`, minus `path`.
    """
    result: dict[str, Any] = {
        "extra_ignore_dirs": config.extra_ignore_dirs or set(),
        "extra_ignore_suffixes": config.extra_ignore_suffixes or set(),
    }

    # Exclude globs: CLI overrides config
    if exclude_glob:
        result["exclude_globs"] = _normalize_names(exclude_glob) or set()
    else:
        result["exclude_globs"] = config.exclude_globs or set()

    if max_file_bytes is not None:
        result["max_file_bytes"] = max_file_bytes
    elif config.max_file_bytes is not None:
        result["max_file_bytes"] = config.max_file_bytes
    else:
        result["max_file_bytes"] = DEFAULT_MAX_FILE_BYTES

    if output_dir is not None:
        result["output_dir"] = output_dir
    elif config.output_dir is not None:
        result["output_dir"] = config.output_dir
    else:
        result["output_dir"] = Path("./out")

    if no_ignore_file:
        result["respect_ignore_file"] = False
    elif config.respect_ignore_file is not None:
        result["respect_ignore_file"] = config.respect_ignore_file
    else:
        result["respect_ignore_file"] = True

    if no_root_name:
        result["include_root_name"] = False
    elif config.include_root_name is not None:
        result["include_root_name"] = config.include_root_name
    else:
        result["include_root_name"] = True

    return result
