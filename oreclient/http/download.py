"""
Plugin artifact download
"""

import logging
import re
from pathlib import Path
from typing import Any, Optional

from .. import routes
from .connection import OreConnection

logger = logging.getLogger('Ore.http.download')

_FILENAME_PATTERN = re.compile(r'filename\*?\s*=\s*(?:UTF-8\'\')?"?([^";]+)"?', re.IGNORECASE)


def parse_content_disposition(header: Optional[str]) -> Optional[str]:
    """Extract the suggested file name from a Content-Disposition header"""
    if not header:
        return None
    match = _FILENAME_PATTERN.search(header)
    if not match:
        return None
    file_name = Path(match.group(1).strip()).name
    return file_name or None


class PluginDownload(OreConnection):
    """Connection to a plugin's download route

    Once opened, ``name`` holds the suggested artifact name without extension:
    the file name from Content-Disposition if the repository sent one,
    otherwise the plugin id.
    """

    def __init__(self, root_url: str, plugin_id: str, version: str, **kwargs: Any):
        super().__init__(root_url, routes.download_route(version), *self._route_params(plugin_id, version),
                         **kwargs)
        self.plugin_id = plugin_id
        self.version = version
        self.name: Optional[str] = None

    @staticmethod
    def _route_params(plugin_id: str, version: str):
        if version == routes.VERSION_RECOMMENDED:
            return (plugin_id,)
        return (plugin_id, version)

    @property
    def file_name(self) -> Optional[str]:
        if self.name is None:
            return None
        return self.name + routes.ARTIFACT_EXTENSION

    def open(self) -> 'PluginDownload':
        super().open()
        suggested = parse_content_disposition(self.response.headers.get('Content-Disposition'))
        self.name = self.plugin_id
        if suggested:
            stem = suggested.rsplit('.', 1)[0] if '.' in suggested else suggested
            if stem:
                self.name = stem
        logger.debug(f"Download of {self.plugin_id} {self.version} named '{self.name}'")
        return self

    def write_to(self, target: Path) -> int:
        """Stream the artifact into ``target``, returning the bytes written"""
        written = 0
        with open(target, 'wb') as f:
            for chunk in self.iter_content():
                f.write(chunk)
                written += len(chunk)
        return written
