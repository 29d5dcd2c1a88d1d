"""Pytest configuration and fixtures."""

import os
import tempfile

# Keep uploads served by the app out of the working tree
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="blog-uploads-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.services.assets import AssetStore, get_asset_store  # noqa: E402

# Smallest valid PNG: 1x1 transparent pixel
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63000100000500010d0a2db40000000049454e44ae426082"
)


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL when DATABASE_URL is set, SQLite locally
if os.getenv("DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/blog", "/blog_test")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    from src import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def asset_store(tmp_path):
    """Asset store rooted in a per-test temporary directory."""
    return AssetStore(tmp_path / "uploads")


@pytest.fixture(scope="function")
def client(db, asset_store):
    """Create a test client with database and asset store overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: asset_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_and_login(
    client: TestClient,
    email: str = "test@example.com",
    password: str = "testpass123",
    name: str = "Test User",
) -> AuthHeaders:
    """Register a user, log in, and return bearer headers for them."""
    response = client.post(
        "/api/users/register",
        json={"name": name, "email": email, "password": password, "confirmPassword": password},
    )
    assert response.status_code == 201

    response = client.post("/api/users/login", json={"email": email, "password": password})
    assert response.status_code == 200
    data = response.json()

    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"}, user_id=data["id"], email=email
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_and_login(client)


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return register_and_login(client, email="other@example.com", name="Other User")


@pytest.fixture
def create_post(client):
    """Factory that creates a post through the API and returns its JSON."""

    def _create(
        headers: AuthHeaders,
        title: str = "First post",
        category: str = "Education",
        description: str = "A description that is long enough.",
        filename: str = "cover.png",
        content: bytes = PNG_BYTES,
    ) -> dict:
        response = client.post(
            "/api/posts",
            headers=headers,
            data={"title": title, "category": category, "description": description},
            files={"thumbnail": (filename, content, "image/png")},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def make_user(client):
    """Factory that registers and logs in additional users."""

    def _make(email: str, password: str = "testpass123", name: str = "Another User"):
        return register_and_login(client, email=email, password=password, name=name)

    return _make


@pytest.fixture
def png_bytes():
    """Bytes of a tiny PNG image."""
    return PNG_BYTES
