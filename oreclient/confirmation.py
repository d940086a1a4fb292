"""
Confirmation of installs that need a platform override

An install that targets a different platform API major version is not
performed straight away. The caller receives an InstallOutcome carrying a
token and the two version strings, shows them to the operator, and then
calls ``confirm`` with that token to install with the check disabled, or to
drop the request.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from .exceptions import ErrorKind, OreError
from .installation import Installation
from .routes import VERSION_RECOMMENDED

if TYPE_CHECKING:
    from .client import Messenger, OreClient

logger = logging.getLogger('Ore.confirmation')


class InstallStatus(Enum):
    INSTALLED = "installed"
    REQUIRES_CONFIRMATION = "requires_confirmation"
    DECLINED = "declined"


@dataclass(frozen=True)
class PendingInstall:
    """An install request waiting for the operator's decision"""
    token: str
    plugin_id: str
    version: str
    install_dependencies: bool
    required: str
    current: str


@dataclass(frozen=True)
class InstallOutcome:
    status: InstallStatus
    plugin_id: str
    installation: Optional[Installation] = None
    token: Optional[str] = None
    required: Optional[str] = None
    current: Optional[str] = None

    @property
    def requires_confirmation(self) -> bool:
        return self.status is InstallStatus.REQUIRES_CONFIRMATION


class ConfirmationRegistry:
    """Holds install requests until they are confirmed or declined"""

    def __init__(self, client: 'OreClient'):
        self.client = client
        self._pending: Dict[str, PendingInstall] = {}
        self._lock = threading.Lock()

    def request_install(self, plugin_id: str, version: str = VERSION_RECOMMENDED,
                        install_dependencies: bool = False,
                        messenger: Optional['Messenger'] = None) -> InstallOutcome:
        """Install a plugin, parking the request if it needs an override"""
        try:
            installation = self.client.install_plugin(plugin_id, version, install_dependencies,
                                                      ignore_platform_version=False, messenger=messenger)
        except OreError as e:
            if e.kind is not ErrorKind.UNSUPPORTED_PLATFORM_VERSION:
                raise
            request = PendingInstall(token=uuid.uuid4().hex, plugin_id=plugin_id, version=version,
                                     install_dependencies=install_dependencies,
                                     required=e.required, current=e.current)
            with self._lock:
                self._pending[request.token] = request
            logger.info(f"Install of {plugin_id} awaits confirmation "
                        f"(required: {e.required}, current: {e.current})")
            return InstallOutcome(InstallStatus.REQUIRES_CONFIRMATION, plugin_id, token=request.token,
                                  required=e.required, current=e.current)

        return InstallOutcome(InstallStatus.INSTALLED, plugin_id, installation=installation)

    def pending(self, token: str) -> Optional[PendingInstall]:
        with self._lock:
            return self._pending.get(token)

    def confirm(self, token: str, accept: bool = True,
                messenger: Optional['Messenger'] = None) -> InstallOutcome:
        """Resolve a parked request, installing it with the override if accepted"""
        with self._lock:
            request = self._pending.pop(token, None)
        if request is None:
            raise OreError(ErrorKind.NO_PENDING_CONFIRMATION, f"No install awaits confirmation for '{token}'")

        if not accept:
            logger.info(f"Install of {request.plugin_id} declined")
            return InstallOutcome(InstallStatus.DECLINED, request.plugin_id)

        installation = self.client.install_plugin(request.plugin_id, request.version,
                                                  request.install_dependencies,
                                                  ignore_platform_version=True, messenger=messenger)
        return InstallOutcome(InstallStatus.INSTALLED, request.plugin_id, installation=installation)
