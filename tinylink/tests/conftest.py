import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tinylink.main import app
from tinylink.db.Connection import database
from tinylink.db.file_storage import FileLinkStorage
from tinylink.db.repository import SQLLinkStorage


# In-memory SQLite stands in for Postgres
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def file_storage(tmp_path):
    """A file-backed store in a throwaway directory."""
    return FileLinkStorage(tmp_path / "data" / "links.json")


@pytest.fixture
def sql_storage():
    """A relational store on a fresh in-memory database."""
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    storage = SQLLinkStorage(engine=engine)
    try:
        yield storage
    finally:
        storage.close()


@pytest.fixture(params=["file", "sql"])
def storage(request):
    """Runs the test once against each backend."""
    return request.getfixturevalue(f"{request.param}_storage")


@pytest.fixture
def client(storage):
    """Creates a test client with the storage dependency overridden."""
    app.dependency_overrides[database.get_storage] = lambda: storage
    app.dependency_overrides[database.get_optional_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_urls():
    """Provides sample URLs for testing."""
    return [
        "https://example.com/test1",
        "https://google.com/search?q=test",
        "https://github.com/user/repo",
    ]
