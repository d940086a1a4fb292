"""
Ore host service
================

Glue between a host process and the Ore client:

- on start, loads the configuration, builds the client and, if enabled,
  checks the repository for updates to active plugins
- while running, offloads operations to worker threads and reports their
  outcome through messengers
- on stop, waits for in-flight operations and applies staged updates and
  removals
"""

import logging
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Dict, Optional

from tabulate import tabulate

from .applier import ApplyReport, UpdateApplier
from .client import OreClient, log_messenger
from .config import OreConfig
from .confirmation import ConfirmationRegistry, InstallOutcome
from .host import PluginHost
from .routes import VERSION_RECOMMENDED
from .tasks import TaskRunner

logger = logging.getLogger('Ore.service')

TASK_NAME_DOWNLOAD = "Ore Download"
TASK_NAME_SEARCH = "Ore Search"

Messenger = Callable[[str], None]


def format_update_report(updates: Dict[str, str], current: Optional[Dict[str, str]] = None) -> str:
    """Render available updates as a table"""
    if not updates:
        return "All plugins are up to date."
    current = current or {}
    rows = [(plugin_id, current.get(plugin_id) or "?", version)
            for plugin_id, version in sorted(updates.items())]
    table = tabulate(rows, headers=["Plugin", "Installed", "Available"], tablefmt="simple")
    return f"{len(updates)} update(s) available:\n{table}"


class OreService:
    """Owns the client for the lifetime of the host"""

    def __init__(self, config_path: Path, host: PluginHost, session=None):
        self.config_path = Path(config_path)
        self.host = host
        self.session = session
        self.config: Optional[OreConfig] = None
        self.client: Optional[OreClient] = None
        self.tasks: Optional[TaskRunner] = None
        self.confirmations: Optional[ConfirmationRegistry] = None

    def start(self) -> Optional[Future]:
        """Initialize, returning the startup update check if one was scheduled"""
        logger.info("Initializing...")
        self._init()
        check = None
        if self.config.check_for_updates:
            check = self.check_for_updates()
        logger.info("Done.")
        return check

    def reload(self):
        """Rebuild from the configuration, keeping staged installs, updates and removals"""
        logger.info("Reloading...")
        self._shutdown_tasks()
        previous = self.client
        self._init()
        if previous is not None:
            self.client._restore(previous.snapshot())
        logger.info("Done.")

    def stop(self) -> ApplyReport:
        """Drain running operations, then apply updates and removals"""
        self._shutdown_tasks()
        report = ApplyReport()
        if self.client is None:
            return report

        report = UpdateApplier(self.client).apply()
        for plugin_id, error in report.failures.items():
            logger.error(f"An error occurred while applying changes for {plugin_id}: {error}")
        if report.updated or report.removed:
            logger.info(f"Applied {len(report.updated)} updates and {len(report.removed)} removals.")
        return report

    def _init(self):
        self.config = OreConfig.load(self.config_path)
        self.client = OreClient.from_config(self.config, self.host, session=self.session)
        self.tasks = TaskRunner(self.config.max_workers)
        self.confirmations = ConfirmationRegistry(self.client)

    def _shutdown_tasks(self):
        if self.tasks is not None:
            self.tasks.shutdown(wait=True)
            self.tasks = None

    # Offloaded operations

    def check_for_updates(self, messenger: Messenger = log_messenger) -> Future:
        logger.info("Checking for updates...")

        def check():
            updates = self.client.get_available_updates()
            current = {plugin_id: self.host.active_version(plugin_id) for plugin_id in updates}
            messenger(format_update_report(updates, current))
            return updates

        return self.tasks.submit(TASK_NAME_SEARCH, check, messenger)

    def install(self, plugin_id: str, version: str = VERSION_RECOMMENDED,
                install_dependencies: Optional[bool] = None,
                messenger: Messenger = log_messenger) -> Future:
        if install_dependencies is None:
            install_dependencies = self.config.auto_resolve_dependencies

        def install() -> InstallOutcome:
            outcome = self.confirmations.request_install(plugin_id, version, install_dependencies, messenger)
            if outcome.requires_confirmation:
                messenger(f"{plugin_id} requires platform API {outcome.required} but this server runs "
                          f"{outcome.current}. Confirm with token {outcome.token} to install anyway.")
            else:
                messenger(f"{plugin_id} downloaded. Restart the server to complete the installation.")
            return outcome

        return self.tasks.submit(TASK_NAME_DOWNLOAD, install, messenger)

    def confirm(self, token: str, accept: bool = True, messenger: Messenger = log_messenger) -> Future:
        def confirm() -> InstallOutcome:
            outcome = self.confirmations.confirm(token, accept, messenger)
            if outcome.installation is not None:
                messenger(f"{outcome.plugin_id} downloaded. Restart the server to complete the installation.")
            return outcome

        return self.tasks.submit(TASK_NAME_DOWNLOAD, confirm, messenger)

    def update(self, plugin_id: str, version: str = VERSION_RECOMMENDED,
               messenger: Messenger = log_messenger) -> Future:
        def update():
            installation = self.client.update_plugin(plugin_id, version)
            messenger(f"{plugin_id} downloaded. Restart the server to complete the update.")
            return installation

        return self.tasks.submit(TASK_NAME_DOWNLOAD, update, messenger)

    def uninstall(self, plugin_id: str, messenger: Messenger = log_messenger) -> Future:
        def uninstall():
            self.client.uninstall_plugin(plugin_id)
            messenger(f"{plugin_id} will be removed when the server restarts.")

        return self.tasks.submit(TASK_NAME_DOWNLOAD, uninstall, messenger)

    def download(self, plugin_id: str, version: str = VERSION_RECOMMENDED,
                 messenger: Messenger = log_messenger) -> Future:
        def download():
            path = self.client.download_plugin(plugin_id, version)
            messenger(f"Download complete: {path}")
            return path

        return self.tasks.submit(TASK_NAME_DOWNLOAD, download, messenger)

    def search(self, query: str, messenger: Messenger = log_messenger) -> Future:
        return self.tasks.submit(TASK_NAME_SEARCH, lambda: self.client.search_projects(query), messenger)
