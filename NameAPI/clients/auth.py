"""Authentication headers sent with every request."""

from typing import Mapping, Optional

import httpx

from .config import Credentials

USERNAME_HEADER = "Api-Username"
TOKEN_HEADER = "Api-Token"
CONTENT_TYPE = "application/json"


def build_headers(credentials: Credentials,
                  extra: Optional[Mapping[str, str]] = None) -> httpx.Headers:
    """
    Merge caller headers with the fixed ones. Content-Type and both
    authentication headers always win, whatever case the caller used.
    """
    headers = httpx.Headers(extra or {})
    headers["Content-Type"] = CONTENT_TYPE
    headers[USERNAME_HEADER] = credentials.user
    headers[TOKEN_HEADER] = credentials.token.get_secret_value()
    return headers


def masked(headers: httpx.Headers) -> dict:
    """Header dict safe for logging, with the token hidden"""
    safe = dict(headers)
    for name in list(safe):
        if name.lower() == TOKEN_HEADER.lower():
            secret = safe[name]
            safe[name] = f"{secret[:4]}..." if len(secret) > 8 else "***"
    return safe
