import httpx
import pytest
from fastapi.testclient import TestClient

from job_board.app import create_app
from tests.backend import FakeBackend, login


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def app(backend):
    return create_app(transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def employer_client(client):
    resp = login(client, "boss@mail.io")
    assert resp.status_code == 303
    return client


@pytest.fixture
def seeker_client(client):
    resp = login(client, "seeker@mail.io")
    assert resp.status_code == 303
    return client
