"""
Update and removal applier
==========================

Run once the host has stopped using its plugins, normally during an orderly
shutdown. Pending updates replace the artifact that declares the same plugin
id in the installation directory, pending removals delete the artifact the
host loaded the plugin from, and the updates directory is emptied.

Every plugin is attempted; failures are collected in the ApplyReport rather
than stopping the queue.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List

from .metadata import PluginMetadataScanner, find_artifact
from .paths import artifact_stem, clean_directory, find_available_path

if TYPE_CHECKING:
    from .client import OreClient

logger = logging.getLogger('Ore.applier')


@dataclass
class ApplyReport:
    """What an apply cycle did, and what it failed to do"""
    updated: Dict[str, Path] = field(default_factory=dict)
    removed: List[str] = field(default_factory=list)
    activated: List[str] = field(default_factory=list)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def merge(self, other: 'ApplyReport') -> 'ApplyReport':
        self.updated.update(other.updated)
        self.removed.extend(other.removed)
        self.activated.extend(other.activated)
        self.failures.update(other.failures)
        return self


class UpdateApplier:
    """Reconciles a client's staged state with the installation directory"""

    def __init__(self, client: 'OreClient'):
        self.client = client

    def apply(self) -> ApplyReport:
        """Apply pending updates, then pending removals"""
        with self.client.gate.exclusive():
            report = self._apply_updates()
            report.merge(self._complete_uninstallations())
            report.activated.extend(self.client._forget_new_installs())
        return report

    def apply_updates(self) -> ApplyReport:
        with self.client.gate.exclusive():
            return self._apply_updates()

    def complete_uninstallations(self) -> ApplyReport:
        with self.client.gate.exclusive():
            return self._complete_uninstallations()

    def _apply_updates(self) -> ApplyReport:
        report = ApplyReport()
        mods_dir = self.client.mods_dir
        pending = self.client._pending_updates()

        if pending:
            logger.info(f"Applying {len(pending)} updates...")
            installed = PluginMetadataScanner(mods_dir).scan()

            for update in pending:
                try:
                    if not update.path.exists():
                        raise FileNotFoundError(f"staged artifact {update.path} is missing")

                    # Delete obsolete version
                    obsolete = find_artifact(installed, update.plugin_id)
                    if obsolete is not None:
                        os.remove(obsolete)
                        del installed[obsolete]
                        logger.info(f"Deleted obsolete artifact {obsolete}")

                    os.makedirs(mods_dir, exist_ok=True)
                    target = find_available_path(artifact_stem(update.path), mods_dir / update.path.name)
                    os.replace(update.path, target)
                except OSError as e:
                    logger.error(f"Failed to apply update for {update.plugin_id}: {e}")
                    report.failures[update.plugin_id] = e
                    continue

                self.client._forget_update(update.plugin_id)
                report.updated[update.plugin_id] = target
                logger.info(f"Updated {update.plugin_id} to {update.version}")

        # Staged updates that failed to move are dropped here as well; they
        # would not survive another cycle without their records anyway
        try:
            clean_directory(self.client.updates_dir)
        except OSError as e:
            logger.error(f"Failed to clean updates directory {self.client.updates_dir}: {e}")
            report.failures['<updates directory>'] = e
        for plugin_id in list(report.failures):
            self.client._forget_update(plugin_id)
        return report

    def _complete_uninstallations(self) -> ApplyReport:
        report = ApplyReport()
        removals = self.client._pending_removals()
        if removals:
            logger.info(f"Uninstalling {len(removals)} plugins...")

        for plugin_id in removals:
            path = self.client.host.active_path(plugin_id)
            try:
                if path is not None:
                    os.remove(path)
            except FileNotFoundError:
                logger.debug(f"{path} was already gone")
            except OSError as e:
                logger.error(f"Failed to uninstall {plugin_id}: {e}")
                report.failures[plugin_id] = e
                continue
            self.client._forget_removal(plugin_id)
            report.removed.append(plugin_id)
            logger.info(f"Uninstalled {plugin_id}")
        return report
