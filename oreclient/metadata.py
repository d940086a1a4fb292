"""
Installed plugin metadata scanner

Plugin jars embed an ``mcmod.info`` descriptor declaring the ids of the
plugins they contain. Scanning the active directory by declared id lets the
update applier find the obsolete artifact of a plugin even when its file has
been renamed.
"""

import json
import logging
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Set

from .routes import ARTIFACT_EXTENSION

logger = logging.getLogger('Ore.metadata')

METADATA_NAME = "mcmod.info"


def parse_plugin_ids(raw: bytes) -> Set[str]:
    """Return the plugin ids declared by an mcmod.info document

    Both the legacy list form and the ``{"modList": [...]}`` form are accepted.
    """
    data = json.loads(raw.decode('utf-8-sig'))
    if isinstance(data, dict):
        entries = data.get('modList', [])
    elif isinstance(data, list):
        entries = data
    else:
        entries = []

    ids = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        plugin_id = entry.get('modid') or entry.get('id')
        if plugin_id:
            ids.add(str(plugin_id))
    return ids


class PluginMetadataScanner:
    """Maps each artifact in a directory to the plugin ids it declares"""

    def __init__(self, target_dir: Path):
        self.target_dir = Path(target_dir)
        self.metadata: Dict[Path, Set[str]] = {}

    def scan(self) -> Dict[Path, Set[str]]:
        """Scan every artifact in the target directory

        Artifacts without a descriptor are left out of the result. Artifacts
        that cannot be read are logged and skipped.
        """
        self.metadata = {}
        if not self.target_dir.is_dir():
            return self.metadata

        for path in sorted(self.target_dir.iterdir()):
            if path.is_file() and path.name.endswith(ARTIFACT_EXTENSION):
                ids = self.scan_artifact(path)
                if ids is not None:
                    self.metadata[path] = ids
        return self.metadata

    def scan_artifact(self, path: Path) -> Optional[Set[str]]:
        try:
            with zipfile.ZipFile(path) as jar:
                try:
                    raw = jar.read(METADATA_NAME)
                except KeyError:
                    return None
        except (zipfile.BadZipFile, OSError) as e:
            logger.warning(f"Could not read plugin archive {path}: {e}")
            return None

        try:
            return parse_plugin_ids(raw)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning(f"Malformed {METADATA_NAME} in {path}: {e}")
            return None


def find_artifact(metadata: Dict[Path, Iterable[str]], plugin_id: str) -> Optional[Path]:
    """First artifact in a scan result declaring ``plugin_id``"""
    for path, ids in metadata.items():
        if plugin_id in ids:
            return path
    return None
