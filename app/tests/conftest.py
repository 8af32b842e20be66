import os
import tempfile
from pathlib import Path

# Settings are read when app modules are imported, so the environment has to
# be in place first.
_TEST_DIR = Path(tempfile.mkdtemp(prefix="campus-events-"))
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'test.db'}"
os.environ["ENVIRONMENT"] = "development"
os.environ["DEFAULT_ADMIN_EMAIL"] = "admin@eventsphere.edu"
os.environ["DEFAULT_ADMIN_PASSWORD"] = "Admin@1234"

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402
from sqlalchemy.orm.session import Session  # noqa: E402

from app.core.security import create_access_token  # noqa: E402
from app.database.db import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.admins import Admin  # noqa: E402
from app.models.events import Event  # noqa: E402
from app.models.registrations import Registration  # noqa: E402
from app.tests.helpers import TestingSessionLocal, engine  # noqa: E402

DEFAULT_ADMIN_EMAIL = os.environ["DEFAULT_ADMIN_EMAIL"]


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Set up and tear down the database for the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_tables():
    """Every test starts without events or registrations. Admins persist so
    the seeded default admin is hashed only once per session."""
    yield
    with TestingSessionLocal() as db:
        db.execute(delete(Registration))
        db.execute(delete(Event))
        db.execute(delete(Admin).where(Admin.email != DEFAULT_ADMIN_EMAIL))
        db.commit()


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def redis_client(monkeypatch: pytest.MonkeyPatch):
    """Point the registration lock at an in-process fake Redis. Each call gets
    its own client on a shared server, like separate real connections."""
    server = fakeredis.FakeServer()

    def make_client():
        return fakeredis.FakeRedis(server=server, decode_responses=True)

    monkeypatch.setattr("app.services.registrations.get_redis_client", make_client)
    return make_client()


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_token() -> str:
    return create_access_token({"id": "admin-test", "email": "tester@campus.edu", "role": "admin"})


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}

