"""
Resource Client

Immutable handle for one point in the Name.com API path hierarchy. Deriving a
child only ever creates a new instance, so one configured root can be reused
by any number of independent, concurrent resource chains.

    client = ResourceClient.build(user="USER", token="TOKEN")

    domain = client.resource("domains", "get", "example.com")
    # or, equivalently
    domain = client.domains("get", "example.com")

    result, transaction = await domain.fetch(query={"a": 1})
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Tuple

import httpx

from .base_client import HTTPMethod, Transaction
from .config import CREDENTIAL_ALIASES, ClientConfig, load_options_from_env
from .dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)

API_ROOT = "/api"


@dataclass(frozen=True, eq=False)
class ResourceClient:
    """
    Thin client for one API resource

    Any attribute that isn't defined here names a path segment, and calling a
    client appends its arguments as further segments. resource() is the
    explicit spelling of both.
    """

    config: ClientConfig
    transport: httpx.AsyncClient
    base_path: Tuple[str, ...] = ()
    dispatcher: RequestDispatcher = field(default_factory=RequestDispatcher)

    @classmethod
    def build(cls, transport: Optional[httpx.AsyncClient] = None, **options: Any) -> "ResourceClient":
        """
        Create a root client

        Args:
            transport: Pre-configured HTTP client to share; one is created
                with the policy timeout and identifier as User-Agent if omitted
            options: See ClientConfig.from_options

        Raises:
            ConfigurationError: If credentials are missing or options are invalid
        """
        config = ClientConfig.from_options(**options)

        if transport is None:
            transport = httpx.AsyncClient(
                timeout=httpx.Timeout(config.policy.timeout),
                headers={"User-Agent": config.identifier},
            )

        logger.debug(f"Initialized client for {config.url}{API_ROOT} as {config.credentials.user}")
        return cls(config=config, transport=transport)

    @classmethod
    def from_env(cls, transport: Optional[httpx.AsyncClient] = None, **overrides: Any) -> "ResourceClient":
        """Create a root client from NAME_API_* environment variables"""
        options = load_options_from_env()
        for alias, name in CREDENTIAL_ALIASES.items():
            if alias in overrides:
                options.pop(name, None)
        options.update(overrides)
        return cls.build(transport=transport, **options)

    def resource(self, *segments: Any) -> "ResourceClient":
        """Return a new client whose path is extended by the given segments"""
        return replace(self, base_path=self.base_path + tuple(str(s) for s in segments))

    def __call__(self, *segments: Any) -> "ResourceClient":
        return self.resource(*segments)

    def __getattr__(self, name: str) -> "ResourceClient":
        # Only reached for names that aren't real attributes; unset fields
        # must not recurse into resource()
        if name.startswith("_") or name in self.__dataclass_fields__:
            raise AttributeError(name)
        return self.resource(name)

    @property
    def path(self) -> str:
        return "/".join((API_ROOT,) + self.base_path)

    @property
    def url(self) -> str:
        return f"{self.config.url}{self.path}"

    async def action(self, verb: Optional[str] = "GET", *,
                     query: Optional[Mapping[str, Any]] = None,
                     data: Any = None,
                     headers: Optional[Mapping[str, str]] = None) -> Tuple[Any, Transaction]:
        """
        Issue a request to this resource

        Args:
            verb: HTTP method, case-insensitive
            query: Query string parameters
            data: Body, sent as JSON unless the method is GET or HEAD
            headers: Extra request headers

        Returns:
            Parsed response body and the raw transaction

        Raises:
            ProtocolError: If the verb is not supported
        """
        method = HTTPMethod.parse(verb)
        return await self.dispatcher.execute(
            method, self.path, query, data, self.config, self.transport, headers=headers
        )

    async def fetch(self, **kwargs: Any) -> Tuple[Any, Transaction]:
        return await self.action("GET", **kwargs)

    async def create(self, **kwargs: Any) -> Tuple[Any, Transaction]:
        return await self.action("POST", **kwargs)

    async def update(self, **kwargs: Any) -> Tuple[Any, Transaction]:
        return await self.action("PUT", **kwargs)

    async def delete(self, **kwargs: Any) -> Tuple[Any, Transaction]:
        return await self.action("DELETE", **kwargs)

    async def aclose(self) -> None:
        """Close the shared transport, ending every derived client's connections"""
        await self.transport.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"
