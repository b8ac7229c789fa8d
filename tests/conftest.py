import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="shop-reports-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'reports.db')}"
os.environ["REPORT_TIMEZONE"] = "UTC"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-report-tests-0123456789")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.api.deps import get_report_storage  # noqa: E402
from app.db.database import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from tests.utils import FakeStorage  # noqa: E402


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_report_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
