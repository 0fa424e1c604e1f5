"""
Main Test Configuration - Stubbed Transport

Every client under test talks to an httpx.MockTransport, so no request ever
leaves the process.
"""

from typing import Any, Callable

import pytest

from NameAPI.clients import ResourceClient
from NameAPI.tests.stub_api import TEST_URL, StubAPI


@pytest.fixture
def stub_api() -> StubAPI:
    """Stub answering 200 with an empty JSON object"""
    return StubAPI()


@pytest.fixture
def make_client() -> Callable[..., ResourceClient]:
    """Factory for root clients wired to a StubAPI"""

    def _make(stub: StubAPI, **options: Any) -> ResourceClient:
        options.setdefault("user", "u")
        options.setdefault("token", "t")
        options.setdefault("url", TEST_URL)
        return ResourceClient.build(transport=stub.transport(), **options)

    return _make


@pytest.fixture
def client(stub_api, make_client) -> ResourceClient:
    return make_client(stub_api)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear NAME_API_* variables and run from a directory without a .env"""
    for option in ("USER", "TOKEN", "IDENTIFIER", "VERSION", "DEBUG",
                   "FATAL", "RETRIES", "TIMEOUT", "RETRY_BACKOFF", "URL"):
        monkeypatch.delenv(f"NAME_API_{option}", raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
