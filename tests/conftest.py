import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from clientes.infrastructure.db import open_store
from clientes.infrastructure.guard import ConnectionGuard, Connected, Disconnected
from clientes.main import create_app

ANA = {
    "name": "Ana",
    "taxId": "111.111.111-11",
    "address": "Rua A",
    "email": "ana@x.com",
    "password": "p1",
}

class BrokenSession:
    """Session stand-in whose every statement fails like a dropped connection"""

    def __init__(self):
        self.rollbacks = 0
        self.added = []

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))

    query = _fail
    execute = _fail
    commit = _fail

    def add(self, obj):
        self.added.append(obj)

    def rollback(self):
        self.rollbacks += 1

@pytest.fixture
def guard():
    guard = ConnectionGuard(open_store("sqlite://"))
    yield guard
    guard.close()

@pytest.fixture
def client(guard):
    return TestClient(create_app(guard=guard))

@pytest.fixture
def offline_client():
    return TestClient(create_app(guard=ConnectionGuard(Disconnected("DATABASE_URL is not set"))))

@pytest.fixture
def broken_session():
    return BrokenSession()

@pytest.fixture
def broken_client(broken_session):
    return TestClient(create_app(guard=ConnectionGuard(Connected(broken_session))))
