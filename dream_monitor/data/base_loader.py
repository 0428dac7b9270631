"""
Base HTTP Loader
================
Shared plumbing for the external JSON APIs:
- Lazy HTTP session management
- Consistent status-code handling (non-2xx raises UpstreamError)
- Per-class logging

Loaders never retry: a failed request ends the pipeline run.
"""

import logging
from abc import ABC
from typing import Any, Dict, Optional

import requests

from ..errors import UpstreamError


class BaseLoader(ABC):
    """
    Abstract base class for external data loaders.

    Subclasses set SOURCE_NAME (used in error messages) and BASE_URL.
    """

    SOURCE_NAME = "base"
    BASE_URL = ""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)
        self._session = session

    @property
    def session(self) -> requests.Session:
        """Lazy-initialized HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({
                "Accept": "application/json",
                "User-Agent": "dream-monitor/0.1",
            })
        return self._session

    def get_json(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        GET `{base_url}/{endpoint}` and decode the JSON body.

        Args:
            endpoint: Path relative to the base URL.
            params: Query parameters.
            headers: Extra request headers.

        Returns:
            Decoded JSON object.

        Raises:
            UpstreamError: On transport failure, non-2xx status, or a body
                that is not JSON.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"{self.SOURCE_NAME} request failed: {e}")
            raise UpstreamError(self.SOURCE_NAME, None, f"{self.SOURCE_NAME} request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            self.logger.error(f"{self.SOURCE_NAME} returned status {response.status_code}")
            raise UpstreamError(self.SOURCE_NAME, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                self.SOURCE_NAME,
                response.status_code,
                f"{self.SOURCE_NAME} returned a non-JSON body",
            ) from e
