"""Pytest fixtures wiring the workspace to an in-memory fake service."""

import pytest
from httpx import AsyncClient, ASGITransport

from workspace_client.remote.http import HttpWorkspaceService
from workspace_client.services.workspace import Workspace

from .fake_service import FakeWorkspaceServer


@pytest.fixture
def server():
    """Fresh fake chat service for each test."""
    return FakeWorkspaceServer()


@pytest.fixture
async def service(server):
    """HTTP service talking to the fake server through ASGITransport."""
    transport = ASGITransport(app=server.app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield HttpWorkspaceService(client=client)


@pytest.fixture
def workspace(service):
    """Unopened workspace; tests seed the server first, then call open()."""
    return Workspace(service)
