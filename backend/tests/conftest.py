"""Pytest configuration and fixtures."""

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from api.checkr import _get_checkr_client, _get_token_cipher, _get_webhook_secret
from database import Base, get_db
from main import app
from services.token_cipher import TokenCipher
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    WEBHOOK_SECRET,
    account,
    connected_account,
)
from tests.fixtures.mocks import MockCheckrClient


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="cipher")
def cipher_fixture():
    """A token cipher with a throwaway key."""
    return TokenCipher(Fernet.generate_key())


@pytest.fixture(name="mock_checkr_client")
def mock_checkr_client_fixture():
    """A Checkr client whose exchange returns token "abc" for account X1."""
    return MockCheckrClient()


def _install_overrides(db, cipher, checkr_client):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[_get_checkr_client] = lambda: checkr_client
    app.dependency_overrides[_get_token_cipher] = lambda: cipher
    app.dependency_overrides[_get_webhook_secret] = lambda: WEBHOOK_SECRET


@pytest.fixture(name="client")
def client_fixture(db, cipher, mock_checkr_client):
    """Create a test client with the test database and a mock Checkr."""
    _install_overrides(db, cipher, mock_checkr_client)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="failing_checkr_client")
def failing_checkr_client_fixture():
    """A Checkr client that rejects every request."""
    return MockCheckrClient(
        should_fail=True,
        errors=["Authorization code has already been used"],
    )


@pytest.fixture(name="client_with_failing_checkr")
def client_with_failing_checkr_fixture(db, cipher, failing_checkr_client):
    """Create a test client whose Checkr calls are all rejected."""
    _install_overrides(db, cipher, failing_checkr_client)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="unreachable_client")
def unreachable_client_fixture(db, cipher):
    """Create a test client whose Checkr calls all time out."""
    _install_overrides(db, cipher, MockCheckrClient(should_fail=True, failure_type="connection"))
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
