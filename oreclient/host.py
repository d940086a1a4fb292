"""
Host plugin oracle

The client never reaches into the host's plugin loader. Everything it needs
to know about what is currently running goes through PluginHost.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional


class PluginHost(ABC):
    """What the host process reports about its active plugins"""

    @abstractmethod
    def is_active(self, plugin_id: str) -> bool:
        """True if the plugin is currently loaded by the host"""

    @abstractmethod
    def active_version(self, plugin_id: str) -> Optional[str]:
        """Version of the loaded plugin, None if unknown or not loaded"""

    @abstractmethod
    def active_path(self, plugin_id: str) -> Optional[Path]:
        """Artifact the loaded plugin came from, None if unknown or not loaded"""

    @abstractmethod
    def active_plugin_ids(self) -> List[str]:
        """Ids of every loaded plugin"""

    @abstractmethod
    def platform_version(self) -> str:
        """Version of the plugin API the host implements"""


@dataclass(frozen=True)
class ActivePlugin:
    plugin_id: str
    version: Optional[str] = None
    path: Optional[Path] = None


class StaticPluginHost(PluginHost):
    """In-memory host for embedding and tests"""

    def __init__(self, platform_version: str, plugins: Iterable[ActivePlugin] = ()):
        self._platform_version = platform_version
        self._plugins: Dict[str, ActivePlugin] = {p.plugin_id: p for p in plugins}
        self._lock = threading.Lock()

    def activate(self, plugin_id: str, version: Optional[str] = None, path: Optional[Path] = None):
        with self._lock:
            self._plugins[plugin_id] = ActivePlugin(plugin_id, version, Path(path) if path else None)

    def deactivate(self, plugin_id: str):
        with self._lock:
            self._plugins.pop(plugin_id, None)

    def is_active(self, plugin_id: str) -> bool:
        with self._lock:
            return plugin_id in self._plugins

    def active_version(self, plugin_id: str) -> Optional[str]:
        with self._lock:
            plugin = self._plugins.get(plugin_id)
        return plugin.version if plugin else None

    def active_path(self, plugin_id: str) -> Optional[Path]:
        with self._lock:
            plugin = self._plugins.get(plugin_id)
        return plugin.path if plugin else None

    def active_plugin_ids(self) -> List[str]:
        with self._lock:
            return list(self._plugins)

    def platform_version(self) -> str:
        return self._platform_version
