"""Shared test configuration and fixtures for the MQM CI Bridge test suite."""

import sys
from pathlib import Path

import httpx
import pytest

# Add backend to Python path so imports work
backend_dir = str(Path(__file__).parent.parent / "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from mqm.client.rest import MqmRestClient  # noqa: E402
from mqm.core.config import MqmConnectionConfig  # noqa: E402


class FakeMqmServer:
    """
    MockTransport handler: answers sign-in itself and serves queued
    responses per (method, path suffix). Every request is recorded.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, suffix: str, *responses: httpx.Response) -> None:
        self.routes[(method, suffix)] = list(responses)

    def calls(self, method: str, suffix: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.endswith(suffix)
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if request.url.path.endswith("/authentication/sign_in"):
            return httpx.Response(
                200,
                headers={"set-cookie": "HPSSO_COOKIE_CSRF=csrf-token; Path=/"},
            )
        if request.url.path.endswith("/authentication/sign_out"):
            return httpx.Response(200)
        for (method, suffix), responses in self.routes.items():
            if request.method == method and request.url.path.endswith(suffix):
                canned = responses.pop(0) if len(responses) > 1 else responses[0]
                return httpx.Response(
                    canned.status_code, headers=canned.headers, content=canned.content
                )
        return httpx.Response(404, json={"message": "no route"})


@pytest.fixture
def mqm_config():
    return MqmConnectionConfig(
        location="http://mqm.test/qcbin",
        shared_space="1001",
        username="jenkins",
        password="secret",
    )


@pytest.fixture
def mqm_server():
    return FakeMqmServer()


@pytest.fixture
def mqm_client(mqm_config, mqm_server):
    client = MqmRestClient(mqm_config, transport=httpx.MockTransport(mqm_server))
    yield client
    client.close()
