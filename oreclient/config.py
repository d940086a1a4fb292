"""
Ore client configuration
========================

Settings are stored as YAML. Loading a path that does not exist yet writes
the defaults there first, so operators always have a file to edit.
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .exceptions import ErrorKind, OreError

logger = logging.getLogger('Ore.config')

DEFAULT_REPOSITORY_URL = "https://ore.spongepowered.org"

# Plugins that are part of the platform itself and never updated through Ore
DEFAULT_IGNORED_UPDATES = ["minecraft", "mcp", "forge", "sponge", "spongeapi", "spongeforge",
                           "spongevanilla", "ore"]


@dataclass
class OreConfig:
    """Client settings"""
    repository_url: str = DEFAULT_REPOSITORY_URL
    installation_directory: Path = Path("./mods")
    updates_directory: Path = Path("./updates")
    downloads_directory: Path = Path("./downloads")
    timeout: float = 10.0
    auto_resolve_dependencies: bool = False
    check_for_updates: bool = True
    ignored_updates: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORED_UPDATES))
    platform_dependency_id: str = "spongeapi"
    max_workers: int = 4

    def __post_init__(self):
        self.installation_directory = Path(self.installation_directory)
        self.updates_directory = Path(self.updates_directory)
        self.downloads_directory = Path(self.downloads_directory)
        self.validate()

    def validate(self):
        if not str(self.repository_url).startswith(('http://', 'https://')):
            raise _invalid(f"repository_url must be an http(s) URL, got {self.repository_url!r}")
        if not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise _invalid(f"timeout must be a positive number, got {self.timeout!r}")
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise _invalid(f"max_workers must be a positive integer, got {self.max_workers!r}")
        if not isinstance(self.ignored_updates, list):
            raise _invalid("ignored_updates must be a list of plugin ids")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ('installation_directory', 'updates_directory', 'downloads_directory'):
            data[key] = str(data[key])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OreConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except TypeError as e:
            raise _invalid(str(e)) from e

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'OreConfig':
        """Load the configuration, writing defaults if the file is missing"""
        path = Path(path)
        if not path.exists():
            config = cls()
            config.save(path)
            logger.info(f"Wrote default configuration to {path}")
            return config

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise _invalid(f"Could not parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise _invalid(f"{path} must contain a mapping of settings")
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]):
        path = Path(path)
        if path.parent and not path.parent.exists():
            os.makedirs(path.parent, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def _invalid(message: str) -> OreError:
    return OreError(ErrorKind.INVALID_CONFIGURATION, message)
