"""Shared test fixtures and utilities."""

import httpx
import pytest

from wow_fetch import create_instance


class RecordingServer:
    """httpx.MockTransport handler that records requests.

    Routes map a path to a callable taking the request and returning a
    fresh response.
    Unknown paths answer 404 with a JSON error body.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes = {}

    def route(self, path, response):
        self.routes[path] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"error": "not found"})
        return response(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def server():
    """Create a recording mock server."""
    return RecordingServer()


@pytest.fixture
def agent(server):
    """Create an httpx transport serving requests from the mock server."""
    return httpx.MockTransport(server)


@pytest.fixture
def fetch(agent):
    """Create an instance talking to the mock server."""
    return create_instance(base_url="https://api.example.com", agent=agent)
