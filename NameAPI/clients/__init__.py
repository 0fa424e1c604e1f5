"""
API Client Layer for NameAPI

Resource clients build request paths; the dispatcher executes them with
authentication, retries and error promotion.
"""

from .base_client import HTTPMethod, Transaction
from .config import ClientConfig, Credentials, RequestPolicy, load_options_from_env
from .dispatcher import RequestDispatcher
from .resource_client import ResourceClient
from .exceptions import (
    NameAPIError,
    ConfigurationError,
    ProtocolError,
    TransportError,
    RequestTimeoutError,
    ApiError
)

__all__ = [
    "HTTPMethod",
    "Transaction",
    "ClientConfig",
    "Credentials",
    "RequestPolicy",
    "load_options_from_env",
    "RequestDispatcher",
    "ResourceClient",
    "NameAPIError",
    "ConfigurationError",
    "ProtocolError",
    "TransportError",
    "RequestTimeoutError",
    "ApiError"
]
