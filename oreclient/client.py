"""
Ore Plugin Lifecycle Client
===========================

Tracks, per plugin id, whether a plugin is active, staged as a new install,
staged as an update, or pending removal, and drives downloads from the
repository accordingly.

Active plugins are held by the host, so their files are never touched here:
updates are staged in the updates directory and removals are queued until
the UpdateApplier runs at shutdown. Plugins that are not active are installed
straight into the installation directory.
"""

import logging
import os
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .config import OreConfig
from .exceptions import OreError
from .host import PluginHost
from .installation import Installation
from .locks import ApplyGate, PluginLocks
from .models import Project, User, Version
from .paths import create_partial_file, find_available_path
from .repository import OreRepository
from .resolver import DependencyResolver
from .routes import VERSION_RECOMMENDED

logger = logging.getLogger('Ore.client')

Messenger = Callable[[str], None]


def log_messenger(message: str):
    """Default messenger, used when a caller does not supply one"""
    logger.info(message)


def major_version(version: Optional[str]) -> Optional[str]:
    """Leading numeric component of a version string"""
    if not version:
        return None
    match = re.match(r'\s*v?(\d+)', version)
    return match.group(1) if match else None


@dataclass(frozen=True)
class LifecycleSnapshot:
    """Point-in-time copy of the client's staged state"""
    new_installs: Dict[str, Installation]
    pending_updates: Dict[str, Installation]
    pending_removals: FrozenSet[str]


class OreClient:
    """Installs, updates and uninstalls plugins from an Ore repository"""

    def __init__(self, repository: OreRepository, host: PluginHost,
                 mods_dir: Path, updates_dir: Path, downloads_dir: Optional[Path] = None,
                 platform_dependency_id: str = "spongeapi",
                 ignored_updates: Iterable[str] = (),
                 messenger: Messenger = log_messenger):
        self.repository = repository
        self.host = host
        self.mods_dir = Path(mods_dir)
        self.updates_dir = Path(updates_dir)
        self.downloads_dir = Path(downloads_dir) if downloads_dir else Path("./downloads")
        self.platform_dependency_id = platform_dependency_id
        self.ignored_updates: Set[str] = set(ignored_updates)
        self.messenger = messenger

        self._new_installs: Dict[str, Installation] = {}
        self._updates_to_install: Dict[str, Installation] = {}
        self._to_remove: Set[str] = set()

        self._state_lock = threading.RLock()
        self._placement_lock = threading.Lock()
        self.plugin_locks = PluginLocks()
        self.gate = ApplyGate()
        self.resolver = DependencyResolver(self)

    @classmethod
    def from_config(cls, config: OreConfig, host: PluginHost, session=None,
                    messenger: Messenger = log_messenger) -> 'OreClient':
        repository = OreRepository(config.repository_url, timeout=config.timeout, session=session)
        return cls(repository, host,
                   mods_dir=config.installation_directory,
                   updates_dir=config.updates_directory,
                   downloads_dir=config.downloads_directory,
                   platform_dependency_id=config.platform_dependency_id,
                   ignored_updates=config.ignored_updates,
                   messenger=messenger)

    @property
    def root_url(self) -> str:
        return self.repository.root_url

    # State queries

    def is_installed(self, plugin_id: str) -> bool:
        """True if the plugin is, or will be after a restart, installed

        A loaded plugin counts unless it is pending removal; an unloaded one
        counts if a new install of it has been staged.
        """
        active = self.host.is_active(plugin_id)
        with self._state_lock:
            removal_pending = plugin_id in self._to_remove
            staged = plugin_id in self._new_installs
        return (active and not removal_pending) or (not active and staged)

    def installed_version(self, plugin_id: str) -> Optional[str]:
        """Version the plugin will run at after the next restart"""
        with self._state_lock:
            pending = self._updates_to_install.get(plugin_id)
            staged = self._new_installs.get(plugin_id)
        if pending is not None:
            return pending.version
        if self.host.is_active(plugin_id):
            return self.host.active_version(plugin_id) or ""
        if staged is not None:
            return staged.version
        return None

    def get_installation(self, plugin_id: str) -> Optional[Installation]:
        if self.host.is_active(plugin_id):
            return Installation(plugin_id, self.host.active_version(plugin_id) or "",
                                self.host.active_path(plugin_id))
        with self._state_lock:
            return self._new_installs.get(plugin_id)

    def snapshot(self) -> LifecycleSnapshot:
        with self._state_lock:
            return LifecycleSnapshot(new_installs=dict(self._new_installs),
                                     pending_updates=dict(self._updates_to_install),
                                     pending_removals=frozenset(self._to_remove))

    def has_pending_updates(self) -> bool:
        return self.pending_update_count() > 0

    def pending_update_count(self) -> int:
        with self._state_lock:
            return len(self._updates_to_install)

    def has_pending_uninstallations(self) -> bool:
        return self.pending_uninstallation_count() > 0

    def pending_uninstallation_count(self) -> int:
        with self._state_lock:
            return len(self._to_remove)

    # Lifecycle operations

    def install_plugin(self, plugin_id: str, version: str = VERSION_RECOMMENDED,
                       install_dependencies: bool = False, ignore_platform_version: bool = False,
                       messenger: Optional[Messenger] = None) -> Installation:
        """Download and stage a plugin that is not installed

        Raises ALREADY_INSTALLED before touching the disk if the plugin is
        installed, and UNSUPPORTED_PLATFORM_VERSION before any download
        (dependencies included) unless ``ignore_platform_version`` is set.
        """
        with self.gate.shared():
            return self._install(plugin_id, version, install_dependencies, ignore_platform_version,
                                 messenger or self.messenger, set())

    def _install(self, plugin_id: str, version: str, install_dependencies: bool,
                 ignore_platform_version: bool, messenger: Messenger, visiting: Set[str]) -> Installation:
        # Ancestors of this install only; siblings get their own copy
        visiting = visiting | {plugin_id}
        with self.plugin_locks.hold(plugin_id):
            self._check_not_installed(plugin_id)

        need_metadata = install_dependencies or not ignore_platform_version
        resolved, version_info = self._resolve_version(plugin_id, version, need_metadata)

        if not ignore_platform_version:
            self._check_platform_version(plugin_id, version_info)

        if install_dependencies:
            self.resolver.install_dependencies(plugin_id, version_info, ignore_platform_version,
                                               messenger, visiting)

        # Dependencies were installed without holding this plugin's lock, so
        # check again before writing anything
        with self.plugin_locks.hold(plugin_id):
            self._check_not_installed(plugin_id)

            # A plugin can be uninstalled but still loaded, in which case the
            # new artifact has to wait in the updates directory
            if self.host.is_active(plugin_id):
                installation = self._download(plugin_id, resolved, self.updates_dir, self._updates_to_install)
            else:
                installation = self._download(plugin_id, resolved, self.mods_dir, self._new_installs)

            with self._state_lock:
                self._to_remove.discard(plugin_id)

        logger.info(f"Installed {plugin_id} {resolved} to {installation.path}")
        return installation

    def uninstall_plugin(self, plugin_id: str):
        """Remove a plugin, deferring to the next restart if it is loaded"""
        with self.gate.shared(), self.plugin_locks.hold(plugin_id):
            self._check_installed(plugin_id)

            if self.host.is_active(plugin_id):
                with self._state_lock:
                    self._to_remove.add(plugin_id)
                logger.info(f"Queued {plugin_id} for removal on restart")
            else:
                with self._state_lock:
                    staged = self._new_installs.pop(plugin_id)
                _delete_artifact(staged.path)
                logger.info(f"Deleted staged install of {plugin_id}")

            with self._state_lock:
                pending = self._updates_to_install.pop(plugin_id, None)
            if pending is not None:
                _delete_artifact(pending.path)
                logger.info(f"Discarded pending update of {plugin_id}")

    def update_plugin(self, plugin_id: str, version: str = VERSION_RECOMMENDED) -> Installation:
        """Download a new version of an installed plugin

        For a loaded plugin the artifact is staged as a pending update. For a
        plugin that is only staged as a new install, the new artifact replaces
        the staged one.
        """
        with self.gate.shared(), self.plugin_locks.hold(plugin_id):
            self._check_installed(plugin_id)

            if version == VERSION_RECOMMENDED:
                available, recommended = self._check_update(plugin_id)
                if not available:
                    raise OreError.no_update_available(plugin_id)
                version = recommended

            if self.host.is_active(plugin_id):
                installation = self._download(plugin_id, version, self.updates_dir, self._updates_to_install)
            else:
                installation = self._download(plugin_id, version, self.mods_dir, self._new_installs)

        logger.info(f"Downloaded update {plugin_id} {version} to {installation.path}")
        return installation

    def is_update_available(self, plugin_id: str) -> bool:
        """True if the repository recommends a different version than installed

        A plugin the repository does not know has no update.
        """
        self._check_installed(plugin_id)
        available, _ = self._check_update(plugin_id)
        return available

    def get_available_updates(self) -> Dict[str, str]:
        """Map of active plugin id to the newer version the repository recommends"""
        updates = {}
        for plugin_id in self.host.active_plugin_ids():
            if plugin_id in self.ignored_updates:
                continue
            current = self.host.active_version(plugin_id)
            try:
                project = self.repository.find_project(plugin_id)
            except OreError as e:
                logger.warning(f"Could not check {plugin_id} for updates: {e}")
                continue
            if project is None or project.recommended_version_name is None:
                continue
            recommended = project.recommended_version_name
            if current != VERSION_RECOMMENDED and current != recommended:
                updates[plugin_id] = recommended
        return updates

    # Repository access

    def download_plugin(self, plugin_id: str, version: str = VERSION_RECOMMENDED) -> Path:
        """Fetch an artifact into the downloads directory without tracking it"""
        target = self._fetch(plugin_id, version, self.downloads_dir)
        logger.info(f"Downloaded {plugin_id} {version} to {target}")
        return target

    def search_projects(self, query: str) -> List[Project]:
        return self.repository.search_projects(query)

    def get_project(self, plugin_id: str) -> Optional[Project]:
        return self.repository.find_project(plugin_id)

    def get_user(self, username: str) -> Optional[User]:
        return self.repository.get_user(username)

    # Used by the UpdateApplier while it holds the gate exclusively

    def _pending_updates(self) -> List[Installation]:
        with self._state_lock:
            return list(self._updates_to_install.values())

    def _pending_removals(self) -> List[str]:
        with self._state_lock:
            return sorted(self._to_remove)

    def _forget_update(self, plugin_id: str):
        with self._state_lock:
            self._updates_to_install.pop(plugin_id, None)

    def _forget_removal(self, plugin_id: str):
        with self._state_lock:
            self._to_remove.discard(plugin_id)

    def _forget_new_installs(self) -> List[str]:
        with self._state_lock:
            activated = sorted(self._new_installs)
            self._new_installs.clear()
        return activated

    def _restore(self, snapshot: LifecycleSnapshot):
        """Take over staged state recorded by a previous client"""
        with self._state_lock:
            self._new_installs.update(snapshot.new_installs)
            self._updates_to_install.update(snapshot.pending_updates)
            self._to_remove.update(snapshot.pending_removals)

    # Internals

    def _resolve_version(self, plugin_id: str, version: str,
                         need_metadata: bool) -> Tuple[str, Optional[Version]]:
        """Concrete version name and, if asked for, its metadata"""
        if version == VERSION_RECOMMENDED:
            project = self.repository.get_project(plugin_id)
            if project.recommended_version_name is None:
                raise OreError.plugin_not_found(plugin_id)
            version = project.recommended_version_name

        if not need_metadata:
            return version, None

        version_info = self.repository.get_version(plugin_id, version)
        return version_info.name or version, version_info

    def _check_platform_version(self, plugin_id: str, version_info: Optional[Version]):
        if version_info is None:
            return
        dependency = version_info.find_dependency(self.platform_dependency_id)
        if dependency is None:
            return
        current = self.host.platform_version()
        required_major = major_version(dependency.version)
        current_major = major_version(current)
        if required_major and current_major and required_major != current_major:
            raise OreError.unsupported_platform_version(plugin_id, dependency.version, current)

    def _check_update(self, plugin_id: str) -> Tuple[bool, Optional[str]]:
        current = self.installed_version(plugin_id)
        project = self.repository.find_project(plugin_id)
        if project is None or project.recommended_version_name is None:
            return False, None
        recommended = project.recommended_version_name
        if current == VERSION_RECOMMENDED or current == recommended:
            return False, recommended
        return True, recommended

    def _fetch(self, plugin_id: str, version: str, target_dir: Path,
               before_place: Optional[Callable[[], None]] = None) -> Path:
        """Download an artifact to a free path in ``target_dir``"""
        download = self.repository.open_download(plugin_id, version)
        try:
            os.makedirs(target_dir, exist_ok=True)
            partial = create_partial_file(target_dir)
            try:
                download.write_to(partial)
                if before_place is not None:
                    before_place()
                with self._placement_lock:
                    target = find_available_path(download.name, target_dir / download.file_name)
                    os.replace(partial, target)
            except Exception:
                _delete_artifact(partial)
                raise
        finally:
            download.close()
        return target

    def _download(self, plugin_id: str, version: str, target_dir: Path,
                  download_map: Dict[str, Installation]) -> Installation:
        def supersede():
            # Override already pending installs/updates
            with self._state_lock:
                superseded = download_map.pop(plugin_id, None)
            if superseded is not None:
                _delete_artifact(superseded.path)
                logger.debug(f"Superseded {superseded.path}")

        target = self._fetch(plugin_id, version, target_dir, before_place=supersede)
        installation = Installation(plugin_id, version, target)
        with self._state_lock:
            download_map[plugin_id] = installation
        return installation

    def _check_not_installed(self, plugin_id: str):
        if self.is_installed(plugin_id):
            raise OreError.already_installed(plugin_id)

    def _check_installed(self, plugin_id: str):
        if not self.is_installed(plugin_id):
            raise OreError.not_installed(plugin_id)


def _delete_artifact(path: Optional[Path]):
    if path is None:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.debug(f"{path} was already gone")
