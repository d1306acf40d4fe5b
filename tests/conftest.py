"""Shared fixtures: a scripted Hookbase API behind httpx.MockTransport."""

import json
from typing import Any, Optional

import httpx
import pytest

from hookbase_shared.models import ExecutionContext

API_URL = "https://api.hookbase.test"
API_KEY = "whr_test_key"
ORG_ID = "org_1"
ORG_PREFIX = f"/api/organizations/{ORG_ID}"


class FakeHookbase:
    """Records requests and answers them from a table of canned responses."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any, Optional[bytes]]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: Optional[Exception] = None

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status: int = 200,
        content: Optional[bytes] = None
    ) -> None:
        self.routes[(method, path)] = (status, json_body, content)

    def org(self, method: str, suffix: str, json_body: Any = None, status: int = 200) -> None:
        self.add(method, f"{ORG_PREFIX}{suffix}", json_body, status)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})

        status, json_body, content = route
        if content is not None:
            return httpx.Response(status, content=content)
        if json_body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def api() -> FakeHookbase:
    return FakeHookbase()


@pytest.fixture
def client(api: FakeHookbase):
    from hookbase_client.client import HookbaseClient

    return HookbaseClient(API_URL, API_KEY, org_id=ORG_ID, transport=api.transport)


@pytest.fixture
def context() -> ExecutionContext:
    return ExecutionContext(request_id="test-req-001")
