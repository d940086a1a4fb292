"""
Ore client - plugin package manager for game server hosts

Installs, updates and removes plugins fetched from an Ore repository.
Changes to plugins the host has loaded are staged and applied when the host
restarts.
"""
from .applier import ApplyReport, UpdateApplier
from .client import LifecycleSnapshot, OreClient
from .config import OreConfig
from .confirmation import ConfirmationRegistry, InstallOutcome, InstallStatus
from .exceptions import ErrorKind, OreError
from .host import ActivePlugin, PluginHost, StaticPluginHost
from .installation import Installation
from .repository import OreRepository
from .routes import VERSION_RECOMMENDED
from .service import OreService

__version__ = "1.0.0"

__all__ = ['ApplyReport', 'UpdateApplier', 'LifecycleSnapshot', 'OreClient', 'OreConfig',
           'ConfirmationRegistry', 'InstallOutcome', 'InstallStatus', 'ErrorKind', 'OreError',
           'ActivePlugin', 'PluginHost', 'StaticPluginHost', 'Installation', 'OreRepository',
           'VERSION_RECOMMENDED', 'OreService']
