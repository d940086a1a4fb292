"""
Ore Repository Connection
=========================

Opens HTTP(S) requests against templated repository routes and classifies
transport failures. A 404 becomes PLUGIN_NOT_FOUND, refused connections and
timeouts become REPOSITORY_UNREACHABLE, also when they happen while the body
is streamed. No retries are performed.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar, Union

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..exceptions import OreError
from .utils import encode_query_string

logger = logging.getLogger('Ore.http.connection')

DEFAULT_TIMEOUT = 10.0
USER_AGENT = "oreclient/1.0"

M = TypeVar('M', bound=BaseModel)


def create_session() -> requests.Session:
    """Create a requests session configured for the repository"""
    session = requests.Session()
    session.headers.update({
        'User-Agent': USER_AGENT,
        'Accept': 'application/json',
    })
    return session


class OreConnection:
    """A single request against a repository route"""

    def __init__(self, root_url: str, route: str, *params: Any,
                 query: Optional[Union[str, Dict[str, str]]] = None,
                 session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 subject: str = "Plugin"):
        self.root_url = root_url.rstrip('/')
        self.route = route
        self.params = params
        self.url = self.root_url + (route % params if params else route) + encode_query_string(query)
        self.session = session or create_session()
        self.timeout = timeout
        self.subject = subject
        self.response: Optional[requests.Response] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def open(self) -> 'OreConnection':
        """Send the request, raising OreError on failure"""
        logger.debug(f"GET {self.url}")
        try:
            response = self.session.get(self.url, stream=True, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning(f"Repository unreachable at {self.root_url}: {e}")
            raise OreError.repository_unreachable(self.root_url) from e

        if response.status_code == 404:
            response.close()
            missing = str(self.params[0]) if self.params else self.url
            raise OreError.plugin_not_found(missing, url=self.url, subject=self.subject)
        if response.status_code >= 400:
            response.close()
            raise OreError.repository_error(self.url, response.status_code)

        self.response = response
        return self

    @property
    def headers(self):
        self._check_open()
        return self.response.headers

    def iter_content(self, chunk_size: int = 8192) -> Iterator[bytes]:
        """Iterate over the raw response body"""
        self._check_open()
        try:
            for chunk in self.response.iter_content(chunk_size=chunk_size):
                if chunk:
                    yield chunk
        except (requests.ConnectionError, requests.Timeout,
                requests.exceptions.ChunkedEncodingError) as e:
            logger.warning(f"Connection to {self.root_url} lost while reading {self.url}: {e}")
            raise OreError.repository_unreachable(self.root_url) from e

    def read_json(self) -> Any:
        self._check_open()
        try:
            return self.response.json()
        except ValueError as e:
            raise OreError.invalid_response(self.url, str(e)) from e

    def read(self, model: Type[M]) -> M:
        """Decode the response body as the given model"""
        data = self.read_json()
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise OreError.invalid_response(self.url, str(e)) from e

    def read_list(self, model: Type[M]) -> List[M]:
        """Decode the response body as a JSON array of the given model"""
        data = self.read_json()
        try:
            return TypeAdapter(List[model]).validate_python(data)
        except ValidationError as e:
            raise OreError.invalid_response(self.url, str(e)) from e

    def close(self):
        if self.response is not None:
            self.response.close()

    def _check_open(self):
        if self.response is None:
            raise RuntimeError("connection has not been opened")
