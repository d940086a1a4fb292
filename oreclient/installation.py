"""
Installation records
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Installation:
    """One plugin artifact on disk, either active or staged

    Two installations are equal when they are for the same plugin id.
    """
    plugin_id: str
    version: str = field(compare=False)
    path: Path = field(compare=False)

    def to_dict(self):
        return {
            'plugin_id': self.plugin_id,
            'version': self.version,
            'path': str(self.path),
        }
