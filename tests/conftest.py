import pytest

from tests.fakes import ADMIN_TOKEN, FakeStorageService, public_url


@pytest.fixture
def fake_storage():
    return FakeStorageService({
        "news-images": ["uploads/a.jpg", "uploads/orphan.jpg"],
        "source-logos": ["uploads/b.png"],
    })


@pytest.fixture
def test_db():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from newsroom.core.database import Base
    from newsroom import models  # noqa: F401

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
def seeded_db(test_db):
    """One article thumbnail and one source logo, both in our storage."""
    from newsroom.models import Article, Source

    source = Source(name="Daily Planet", logo_url=public_url("source-logos", "uploads/b.png"))
    article = Article(
        title="Launch day",
        slug="launch-day",
        thumbnail_url=public_url("news-images", "uploads/a.jpg"),
        source=source,
    )
    test_db.add_all([source, article])
    test_db.commit()
    return test_db


@pytest.fixture
def reference_repo(seeded_db):
    from newsroom.repositories.storage_reference_repository import StorageReferenceRepository
    return StorageReferenceRepository(seeded_db)


@pytest.fixture
def cleanup_service(reference_repo, fake_storage):
    from newsroom.services.orphan_cleanup import OrphanCleanupService
    return OrphanCleanupService(reference_repo, fake_storage, buckets=["news-images", "source-logos"])


@pytest.fixture
def admin_settings(monkeypatch):
    from newsroom.config import get_settings

    monkeypatch.setenv("ADMIN_API_TOKEN", ADMIN_TOKEN)
    monkeypatch.setenv("STORAGE_BUCKETS", "news-images,source-logos")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
async def async_client(seeded_db, fake_storage, admin_settings):
    from httpx import AsyncClient, ASGITransport
    from newsroom.main import app
    from newsroom.core.database import get_db
    from newsroom.api.dependencies import get_storage_service

    def override_get_db():
        try:
            yield seeded_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: fake_storage

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
