"""
Dependency installation for the Ore client

Dependencies are installed best-effort: a dependency that cannot be found,
downloaded or installed produces a warning and never aborts the install of
the plugin that declared it, nor of its sibling dependencies. There is no
version constraint solving; a dependency is installed at the version the
declaring plugin names, or at the recommended version if it names none.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set

from .exceptions import ErrorKind, OreError
from .models import Version
from .routes import VERSION_RECOMMENDED

if TYPE_CHECKING:
    from .client import OreClient

logger = logging.getLogger('Ore.resolver')


@dataclass
class DependencyReport:
    """Outcome of installing one plugin version's dependencies"""
    installed: List[str] = field(default_factory=list)
    satisfied: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)


class DependencyResolver:
    """Recursively installs the dependencies declared by a plugin version"""

    def __init__(self, client: 'OreClient'):
        self.client = client

    def install_dependencies(self, plugin_id: str, version: Optional[Version],
                             ignore_platform_version: bool,
                             messenger: Callable[[str], None],
                             visiting: Optional[Set[str]] = None) -> DependencyReport:
        """Install every dependency of ``version`` that is not installed yet

        ``visiting`` holds the ids already being installed higher up the
        chain; they are skipped so cyclic dependencies terminate.
        """
        report = DependencyReport()
        if version is None:
            return report
        visiting = visiting if visiting is not None else {plugin_id}

        for dependency in version.dependencies:
            dep_id = dependency.plugin_id
            if dep_id == self.client.platform_dependency_id:
                continue
            if dep_id in visiting:
                logger.debug(f"Skipping {dep_id}, already being installed")
                continue

            required = dependency.version or VERSION_RECOMMENDED

            if self.client.is_installed(dep_id):
                self._check_satisfied(plugin_id, dep_id, required, messenger)
                report.satisfied.append(dep_id)
                continue

            messenger(f"Installing dependency {dep_id} {required}...")
            try:
                self.client._install(dep_id, required, True, ignore_platform_version, messenger, visiting)
            except OreError as e:
                if e.kind is ErrorKind.ALREADY_INSTALLED:
                    report.satisfied.append(dep_id)
                    continue
                self._warn(messenger, f"Could not install dependency {dep_id} {required} of {plugin_id}: {e}")
                report.failed[dep_id] = str(e)
                continue
            except OSError as e:
                self._warn(messenger, f"Could not write dependency {dep_id} of {plugin_id}: {e}")
                report.failed[dep_id] = str(e)
                continue
            report.installed.append(dep_id)

        return report

    def _check_satisfied(self, plugin_id: str, dep_id: str, required: str,
                         messenger: Callable[[str], None]):
        if required == VERSION_RECOMMENDED:
            return
        installed = self.client.installed_version(dep_id)
        if installed and installed != required:
            self._warn(messenger, f"{plugin_id} requires {dep_id} {required} "
                                  f"but version {installed} is installed")

    @staticmethod
    def _warn(messenger: Callable[[str], None], message: str):
        logger.warning(message)
        messenger(f"Warning: {message}")
