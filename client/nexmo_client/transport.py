"""
HTTP transport for the Nexmo client

A transport is any callable ``transport(descriptor, callback)`` that issues a
single request and calls ``callback(error, response, body)`` once.
"""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import requests

from .config import DEFAULT_TIMEOUT
from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {'Accept': 'application/json'}


@dataclass(frozen=True)
class RequestDescriptor:
    """Method, URL and headers of one outbound request"""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))


TransportCallback = Callable[[Optional[Exception], Optional[requests.Response], Optional[str]], None]


class RequestsTransport:
    """Transport backed by a requests Session"""

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 executor: Optional[Executor] = None):
        self.session = session or requests.Session()
        self.timeout = timeout
        # When set, requests run on the executor and the call returns a Future
        self.executor = executor

    def __call__(self, descriptor: RequestDescriptor, callback: TransportCallback):
        if self.executor is not None:
            return self.executor.submit(self._perform, descriptor, callback)
        self._perform(descriptor, callback)
        return None

    def _perform(self, descriptor: RequestDescriptor, callback: TransportCallback) -> None:
        """Issue the request and hand the outcome to the callback"""
        try:
            response = self.session.request(
                descriptor.method,
                descriptor.url,
                headers=descriptor.headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"{descriptor.method} request failed: {e.__class__.__name__}")
            error = TransportError(f"Request failed: {e}")
            error.__cause__ = e
            callback(error, None, None)
            return

        callback(None, response, response.text)

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
