"""
Typed access to the Ore web API
"""

import logging
from typing import List, Optional

import requests

from . import routes
from .exceptions import ErrorKind, OreError
from .http.connection import DEFAULT_TIMEOUT, OreConnection, create_session
from .http.download import PluginDownload
from .models import Project, User, Version

logger = logging.getLogger('Ore.repository')


class OreRepository:
    """Ore repository reachable at ``root_url``"""

    def __init__(self, root_url: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.root_url = root_url.rstrip('/')
        self.timeout = timeout
        self.session = session or create_session()

    def route_url(self, route: str, *params) -> str:
        return self.root_url + (route % params if params else route)

    def connect(self, route: str, *params, query=None, subject: str = "Plugin") -> OreConnection:
        """Open a connection to the given route"""
        return OreConnection(self.root_url, route, *params, query=query,
                             session=self.session, timeout=self.timeout, subject=subject).open()

    def get_project(self, plugin_id: str) -> Project:
        with self.connect(routes.PROJECT, plugin_id) as conn:
            return conn.read(Project)

    def find_project(self, plugin_id: str) -> Optional[Project]:
        """Like get_project but returns None when the repository has no such project"""
        try:
            return self.get_project(plugin_id)
        except OreError as e:
            if e.kind is ErrorKind.PLUGIN_NOT_FOUND:
                return None
            raise

    def get_version(self, plugin_id: str, version: str) -> Version:
        with self.connect(routes.VERSION, plugin_id, version) as conn:
            return conn.read(Version)

    def list_versions(self, plugin_id: str) -> List[Version]:
        with self.connect(routes.VERSION_LIST, plugin_id) as conn:
            return conn.read_list(Version)

    def list_projects(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Project]:
        query = {}
        if limit is not None:
            query['limit'] = str(limit)
        if offset is not None:
            query['offset'] = str(offset)
        with self.connect(routes.PROJECT_LIST, query=query) as conn:
            return conn.read_list(Project)

    def search_projects(self, query: str) -> List[Project]:
        with self.connect(routes.PROJECT_LIST, query={'q': query}) as conn:
            return conn.read_list(Project)

    def get_user(self, username: str) -> Optional[User]:
        try:
            with self.connect(routes.USER, username, subject="User") as conn:
                return conn.read(User)
        except OreError as e:
            if e.kind is ErrorKind.PLUGIN_NOT_FOUND:
                return None
            raise

    def list_users(self) -> List[User]:
        with self.connect(routes.USER_LIST) as conn:
            return conn.read_list(User)

    def open_download(self, plugin_id: str, version: str) -> PluginDownload:
        """Open the download of a plugin version; the caller must close it"""
        download = PluginDownload(self.root_url, plugin_id, version,
                                  session=self.session, timeout=self.timeout)
        return download.open()
