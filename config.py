"""Project configuration loaded from an optional YAML file."""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml

from scanner.discovery import DEFAULT_EXTENSION
from scanner.errors import MapdownError

logger = logging.getLogger(__name__)


CONFIG_FILENAME = ".mapdown.yaml"
FORMATS = ("ascii", "mermaid", "json")


class ConfigError(MapdownError):
    """The configuration file is unreadable or invalid."""


@dataclass
class Config:
    """Settings shared by one-shot builds and watch mode."""

    extension: str = DEFAULT_EXTENSION
    exclude_dirs: Set[str] = field(default_factory=set)
    max_depth: Optional[int] = None
    keep_duplicates: bool = False
    format: str = "ascii"
    debounce: float = 1.0

    def build_options(self) -> Dict[str, Any]:
        """Keyword arguments for scanner.builder.build_graph."""
        return {
            "extension": self.extension,
            "exclude_dirs": set(self.exclude_dirs),
            "max_depth": self.max_depth,
            "keep_duplicates": self.keep_duplicates,
        }


def load_config(root: Path, path: Optional[Path] = None) -> Config:
    """
    Load configuration for a scan root.

    Args:
        root: The scanned root; ``.mapdown.yaml`` there is used when present.
        path: Explicit configuration file. Must exist if given.

    Returns:
        Config with file values applied over the defaults.

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds unknown
                     keys or values of the wrong type.
    """
    if path is None:
        path = Path(root) / CONFIG_FILENAME
        if not path.is_file():
            return Config()
    elif not Path(path).is_file():
        raise ConfigError(f"config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot load {path}: {exc}") from exc

    logger.debug("Loaded configuration from %s", path)
    return parse_config(data or {}, source=str(path))


def parse_config(data: Any, source: str = "<config>") -> Config:
    """Validate a parsed YAML mapping and turn it into a Config."""
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at top level")

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{source}: unknown keys: {', '.join(map(str, unknown))}")

    config = Config()

    if "extension" in data:
        ext = data["extension"]
        if not isinstance(ext, str) or not ext:
            raise ConfigError(f"{source}: 'extension' must be a non-empty string")
        config.extension = ext if ext.startswith(".") else "." + ext

    if "exclude_dirs" in data:
        dirs = data["exclude_dirs"] or []
        if not isinstance(dirs, list) or not all(isinstance(d, str) for d in dirs):
            raise ConfigError(f"{source}: 'exclude_dirs' must be a list of names")
        config.exclude_dirs = set(dirs)

    if "max_depth" in data:
        depth = data["max_depth"]
        if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int) or depth < 0):
            raise ConfigError(f"{source}: 'max_depth' must be a non-negative integer")
        config.max_depth = depth

    if "keep_duplicates" in data:
        if not isinstance(data["keep_duplicates"], bool):
            raise ConfigError(f"{source}: 'keep_duplicates' must be true or false")
        config.keep_duplicates = data["keep_duplicates"]

    if "format" in data:
        if data["format"] not in FORMATS:
            raise ConfigError(f"{source}: 'format' must be one of {', '.join(FORMATS)}")
        config.format = data["format"]

    if "debounce" in data:
        debounce = data["debounce"]
        if isinstance(debounce, bool) or not isinstance(debounce, (int, float)) or debounce < 0:
            raise ConfigError(f"{source}: 'debounce' must be a non-negative number")
        config.debounce = float(debounce)

    return config
