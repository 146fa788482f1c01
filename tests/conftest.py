import os
import tempfile

# Settings are read once at import time; keep test runs away from the working tree
os.environ.setdefault("IMAGE_DIR", tempfile.mkdtemp(prefix="newsdesk-images-"))
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from unittest.mock import AsyncMock, MagicMock

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def make_upload():
    from newsdesk.services.file_store import UploadedFile

    def _make(data=PNG_BYTES, mime_type="image/png", name="photo.png"):
        stream = MagicMock()
        stream.read = AsyncMock(side_effect=[data, b""])
        return UploadedFile(size=len(data), mime_type=mime_type, original_name=name, stream=stream)

    return _make


@pytest.fixture
def mock_settings(tmp_path):
    settings = MagicMock()
    settings.app_url = "http://test"
    settings.image_dir = str(tmp_path / "images")
    settings.max_image_size_mb = 5
    settings.max_image_size_bytes = 5 * 1024 * 1024
    settings.allowed_image_types = ["image/png", "image/jpg", "image/jpeg", "image/gif", "image/webp"]
    settings.default_profile_image = None
    settings.orphan_grace_minutes = 60
    return settings


@pytest.fixture
def image_store(mock_settings):
    from newsdesk.services.file_store import ImageStore
    return ImageStore(mock_settings.image_dir)


@pytest.fixture
def test_db():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from newsdesk.core.database import Base
    from newsdesk.models import news, user  # noqa: F401

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def owner(test_db):
    from newsdesk.repositories.user_repository import UserRepository
    return UserRepository(test_db).create(
        name="Test Reporter",
        email="reporter@example.com",
        image="avatar.png",
        api_token="owner-token",
    )


@pytest.fixture
def other_user(test_db):
    from newsdesk.repositories.user_repository import UserRepository
    return UserRepository(test_db).create(
        name="Other Reporter",
        email="other@example.com",
        api_token="other-token",
    )


@pytest.fixture
def owner_headers(owner):
    return {"Authorization": f"Bearer {owner.api_token}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {other_user.api_token}"}


@pytest.fixture
def news_service(test_db, image_store, mock_settings):
    from newsdesk.news.transform import NewsApiTransform
    from newsdesk.repositories.news_repository import NewsRepository
    from newsdesk.services.news_service import NewsService
    from newsdesk.services.upload_validator import UploadValidator

    return NewsService(
        news_repo=NewsRepository(test_db),
        image_store=image_store,
        transformer=NewsApiTransform.from_settings(mock_settings),
        upload_validator=UploadValidator.from_settings(mock_settings),
    )


@pytest.fixture
async def async_client(test_db, image_store, mock_settings):
    from httpx import AsyncClient, ASGITransport
    from newsdesk.main import app
    from newsdesk.core.database import get_db
    from newsdesk.api import dependencies

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[dependencies.get_image_store] = lambda: image_store

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
