import os

os.environ.setdefault("TAXCLUSIVE_SECRET_KEY", "test-secret-key")
os.environ["TAXCLUSIVE_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RECAPTCHA_SECRET_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taxclusive import config
from taxclusive.db.database import Base, get_db, set_sqlite_pragma
from taxclusive.main import app
from taxclusive.routes.auth import create_session_token
from taxclusive.services import users as users_service


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", set_sqlite_pragma)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def admin(db):
    return users_service.create_user(
        db, email="admin@taxclusive.com", password="admin123", name="Admin User", role="ADMIN"
    )


@pytest.fixture
def editor(db):
    return users_service.create_user(
        db, email="editor@taxclusive.com", password="editor123", name="Editor User", role="EDITOR"
    )


@pytest.fixture
def make_client(session_factory):
    """Build TestClients against the test database, optionally signed in."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    def _make(user=None):
        client = TestClient(app)
        if user is not None:
            client.cookies.set(config.SESSION_COOKIE_NAME, create_session_token(user))
        return client

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def admin_client(make_client, admin):
    return make_client(admin)


@pytest.fixture
def editor_client(make_client, editor):
    return make_client(editor)
