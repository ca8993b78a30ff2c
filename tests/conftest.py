# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Fixtures and Utilities

Provides a recording fake backend, an injectable clock for the response
cache, and pre-wired dispatcher/registry instances.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from github_mcp.core.config import Config
from github_mcp.core.errors import BackendError
from github_mcp.dispatcher import Dispatcher
from github_mcp.response_cache import ResponseCache
from github_mcp.tools import build_github_registry


# ============================================================================
# Fakes
# ============================================================================

class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingBackend:
    """
    Backend substitute that records every invocation.

    Responses are looked up by (method, endpoint); anything else returns
    the default payload. Assign an exception to `error` to make every call fail.
    """

    def __init__(self, default: Any = None):
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self.responses: Dict[Tuple[str, str], Any] = {}
        self.default = default if default is not None else {}
        self.error: Optional[Exception] = None

    def respond(self, endpoint: str, payload: Any, method: str = "GET"):
        self.responses[(method, endpoint)] = payload

    async def invoke(self, endpoint, method="GET", body=None, headers=None):
        self.calls.append((method, endpoint, body))
        if self.error is not None:
            raise self.error
        return self.responses.get((method, endpoint), self.default)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def registry():
    return build_github_registry()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl_seconds=60, max_entries=128, clock=clock)


@pytest.fixture
def config():
    return Config(public_url="http://testserver", keepalive_interval=30.0)


@pytest.fixture
def dispatcher(registry, backend, cache, config):
    return Dispatcher(registry, backend, cache=cache, config=config)


@pytest.fixture
def repo_payload():
    """Trimmed GET /repos/{owner}/{repo} response"""
    return {
        "full_name": "acme/widgets",
        "description": "Widget factory",
        "language": "Python",
        "stargazers_count": 42,
        "forks_count": 7,
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2025-06-01T12:00:00Z",
        "html_url": "https://github.com/acme/widgets"
    }


@pytest.fixture
def failing_backend(backend):
    backend.error = BackendError("GitHub API error: 404 Not Found", status=404)
    return backend
