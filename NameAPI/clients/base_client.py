"""
Base API Client Types

HTTP method enumeration and the transaction record handed back with every
result, so callers can inspect the raw request and response.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
import json
import logging

import httpx

from .exceptions import ProtocolError

logger = logging.getLogger(__name__)


class HTTPMethod(Enum):
    """Supported HTTP methods"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, verb: Optional[str]) -> "HTTPMethod":
        """
        Resolve a verb string, case-insensitively. An empty verb means GET.

        Raises:
            ProtocolError: If the verb is not one the transport can issue
        """
        name = (verb or "GET").upper()
        try:
            return cls(name)
        except ValueError:
            raise ProtocolError(f"Unsupported HTTP method: {name}", verb=name) from None


# Verbs that never carry a request body
BODYLESS_METHODS = frozenset({HTTPMethod.GET, HTTPMethod.HEAD})


@dataclass
class Transaction:
    """Raw HTTP transaction behind a result"""
    request: httpx.Request
    response: Optional[httpx.Response] = None
    attempts: int = 0

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None

    @property
    def success(self) -> bool:
        """True for 2xx and 3xx responses"""
        return self.response is not None and 200 <= self.response.status_code < 400


def parse_body(response: httpx.Response) -> Any:
    """
    Decode a response body.

    JSON bodies are decoded; anything else is returned as text, and an empty
    body as None.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug(f"Non-JSON response body ({len(response.content)} bytes), returning text")
        return response.text
