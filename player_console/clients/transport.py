"""
HTTP transport used by the GameLayer client.

The client only depends on the ``Transport`` contract:
``request(method, url, headers, body) -> TransportResponse``. The default
implementation wraps a ``requests.Session`` and runs each blocking call in a
worker thread so the event loop is never blocked.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests
from tenacity import (  # type: ignore
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    RetryError,
)

from player_console.errors import TransportFailure


@dataclass
class TransportResponse:
    """
    Raw upstream response.

    Attributes:
        status: HTTP status code
        json: Parsed JSON body, None when the body was not JSON
        text: Raw body text
    """
    status: int
    json: Any = None
    text: str = ''

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Dict[str, Any]] = None,
    ) -> TransportResponse:
        ...


class RequestsTransport:
    """
    Transport backed by requests.

    Connection errors are retried with exponential backoff. HTTP error
    statuses are returned as-is and never retried.

    Usage:
        transport = RequestsTransport(max_retries=3)
        response = await transport.request("GET", url, headers)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        max_retries: int = 3,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self._send = retry(
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            stop=stop_after_attempt(max(1, max_retries)),
            wait=wait_exponential(multiplier=1, min=1, max=8),
        )(self._send_once)

    def _send_once(self, method: str, url: str, headers: Dict[str, str], body) -> requests.Response:
        return self.session.request(method, url, headers=headers, json=body, timeout=self.timeout)

    async def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Dict[str, Any]] = None,
    ) -> TransportResponse:
        try:
            response = await asyncio.to_thread(self._send, method, url, headers, body)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise TransportFailure(f"Network error: {cause}") from cause
        except requests.RequestException as e:
            raise TransportFailure(f"Network error: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return TransportResponse(status=response.status_code, json=payload, text=response.text)
