"""
HTTP transport for tile requests.

``RequestsTransport`` performs a single GET per call through a shared
``requests.Session`` and classifies failures: timeouts, connection
errors, HTTP 429 and 5xx are transient (worth retrying); any other error
status is permanent. Retrying itself is the fetcher's job.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

import requests

from ..constants import RETRYABLE_STATUS_CODES
from ..exceptions import TileFetchError

logger = logging.getLogger("static_maps.tiles.transport")


@dataclass(frozen=True)
class TileResponse:
    content: bytes
    content_type: Optional[str] = None
    status: int = 200


class TileTransport(Protocol):
    def get(self, url: str, headers: Mapping[str, str], timeout: float) -> TileResponse:
        ...


class RequestsTransport:
    """
    Tile transport backed by ``requests``.

    Args:
        user_agent: Default User-Agent header; layer headers override it
        session: Optional pre-configured session (proxies, adapters)
    """

    def __init__(self, user_agent: Optional[str] = None, session: Optional[requests.Session] = None):
        self.user_agent = user_agent
        self._session = session
        self._session_lock = threading.Lock()

    def _get_session(self) -> requests.Session:
        with self._session_lock:
            if self._session is None:
                self._session = requests.Session()
            return self._session

    def get(self, url: str, headers: Mapping[str, str], timeout: float) -> TileResponse:
        """
        GET one tile.

        Raises:
            TileFetchError: On network errors or a non-2xx status
        """
        request_headers = {}
        if self.user_agent:
            request_headers["User-Agent"] = self.user_agent
        request_headers.update(headers or {})

        try:
            response = self._get_session().get(url, headers=request_headers, timeout=timeout)
        except requests.Timeout as e:
            raise TileFetchError(f"Timeout fetching {url}: {e}", url=url, transient=True) from e
        except requests.ConnectionError as e:
            raise TileFetchError(f"Connection error fetching {url}: {e}", url=url, transient=True) from e
        except requests.RequestException as e:
            raise TileFetchError(f"Request failed for {url}: {e}", url=url) from e

        status = response.status_code
        if status >= 400:
            response.close()
            raise TileFetchError(
                f"HTTP {status} for {url}",
                url=url,
                status=status,
                transient=status in RETRYABLE_STATUS_CODES,
            )

        return TileResponse(
            content=response.content,
            content_type=response.headers.get("Content-Type"),
            status=status,
        )

    def fetch_bytes(self, url: str, timeout: float = 10.0) -> bytes:
        """Plain GET for non-tile resources such as marker icons."""
        return self.get(url, {}, timeout).content

    def close(self) -> None:
        with self._session_lock:
            if self._session is not None:
                self._session.close()
                self._session = None
