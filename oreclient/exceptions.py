"""
Ore client errors

Every failure surfaced by the client is an OreError tagged with an ErrorKind.
Callers switch on ``error.kind`` and read the structured fields instead of
parsing messages.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of failures reported by the client"""
    ALREADY_INSTALLED = "already_installed"
    NOT_INSTALLED = "not_installed"
    PLUGIN_NOT_FOUND = "plugin_not_found"
    NO_UPDATE_AVAILABLE = "no_update_available"
    UNSUPPORTED_PLATFORM_VERSION = "unsupported_platform_version"
    REPOSITORY_UNREACHABLE = "repository_unreachable"
    REPOSITORY_ERROR = "repository_error"
    INVALID_RESPONSE = "invalid_response"
    NO_PENDING_CONFIRMATION = "no_pending_confirmation"
    INVALID_CONFIGURATION = "invalid_configuration"


class OreError(Exception):
    """Base (and only) exception raised by the Ore client"""

    def __init__(self, kind: ErrorKind, message: str, plugin_id: Optional[str] = None,
                 required: Optional[str] = None, current: Optional[str] = None,
                 url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.plugin_id = plugin_id
        self.required = required
        self.current = current
        self.url = url
        self.status = status

    def __repr__(self):
        return f"OreError({self.kind.name}, {str(self)!r})"

    @classmethod
    def already_installed(cls, plugin_id: str) -> 'OreError':
        return cls(ErrorKind.ALREADY_INSTALLED,
                   f"Plugin '{plugin_id}' is already installed", plugin_id=plugin_id)

    @classmethod
    def not_installed(cls, plugin_id: str) -> 'OreError':
        return cls(ErrorKind.NOT_INSTALLED,
                   f"Plugin '{plugin_id}' is not installed", plugin_id=plugin_id)

    @classmethod
    def plugin_not_found(cls, plugin_id: str, url: Optional[str] = None,
                         subject: str = "Plugin") -> 'OreError':
        return cls(ErrorKind.PLUGIN_NOT_FOUND,
                   f"{subject} '{plugin_id}' could not be found on the repository",
                   plugin_id=plugin_id, url=url)

    @classmethod
    def no_update_available(cls, plugin_id: str) -> 'OreError':
        return cls(ErrorKind.NO_UPDATE_AVAILABLE,
                   f"No update available for plugin '{plugin_id}'", plugin_id=plugin_id)

    @classmethod
    def unsupported_platform_version(cls, plugin_id: str, required: str, current: str) -> 'OreError':
        return cls(ErrorKind.UNSUPPORTED_PLATFORM_VERSION,
                   f"Unsupported platform API major version! (required: {required}, current: {current})",
                   plugin_id=plugin_id, required=required, current=current)

    @classmethod
    def repository_unreachable(cls, url: str) -> 'OreError':
        return cls(ErrorKind.REPOSITORY_UNREACHABLE,
                   f"Could not connect to Ore repository at URL: {url}", url=url)

    @classmethod
    def repository_error(cls, url: str, status: int) -> 'OreError':
        return cls(ErrorKind.REPOSITORY_ERROR,
                   f"Ore repository returned HTTP {status} for URL: {url}", url=url, status=status)

    @classmethod
    def invalid_response(cls, url: str, reason: str) -> 'OreError':
        return cls(ErrorKind.INVALID_RESPONSE,
                   f"Malformed response from {url}: {reason}", url=url)
