import os
import tempfile
from datetime import date

# Settings are read at import time; point them at throwaway resources first.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_ENV"] = "test"
os.environ["RATE_LIMIT_AUTH_PER_MIN"] = "0"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="jobboard-cvs-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import jobboard.database as database_module
from jobboard.config import settings
from jobboard.core.security import Identity, create_access_token, hash_password
from jobboard.database import Base, get_db
from jobboard.dependencies import get_current_admin, get_current_identity
from jobboard.main import app
from jobboard.models import Application, Job, User  # noqa: F401
from jobboard.models.user import ROLE_ADMIN, ROLE_USER

# In-memory SQLite shared by every session (StaticPool keeps one connection).
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
event.listen(engine, "connect", database_module._enable_sqlite_foreign_keys)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

database_module.engine = engine
database_module.SessionLocal = TestingSessionLocal

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"

JOB_PAYLOAD = {
    "title": "Backend Engineer",
    "company_name": "Acme",
    "company_description": "We build rockets",
    "job_description": "Write Python services",
    "location": "Remote",
    "requirements": "Python, SQL",
    "salary": "$100,000",
    "tags": "python,backend",
    "deadline": "2030-12-31",
}


def _override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "cvs"))


@pytest.fixture
def db_session():
    """Fresh tables and a session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def api(db_session):
    """Client against the real app and the in-memory database."""
    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---- Stubbed identities for router tests that monkeypatch the repos ----
@pytest.fixture
def stub_identity() -> Identity:
    return Identity(id=1, role=ROLE_USER)


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(id=2, role=ROLE_ADMIN)


@pytest.fixture
def client(stub_identity: Identity):
    def _db_override():
        yield object()

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_current_identity] = lambda: stub_identity
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(admin_identity: Identity):
    def _db_override():
        yield object()

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_current_identity] = lambda: admin_identity
    app.dependency_overrides[get_current_admin] = lambda: admin_identity
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---- Real rows + tokens for integration tests ----
def make_user(db, username: str, role: str = ROLE_USER, password: str = "Passw0rd1") -> User:
    user = User(username=username, password_hash=hash_password(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_job(db, **overrides) -> Job:
    fields = dict(JOB_PAYLOAD, deadline=date(2030, 12, 31))
    fields.update(overrides)
    job = Job(**fields)
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def admin_user(db_session) -> User:
    return make_user(db_session, "admin", role=ROLE_ADMIN)


@pytest.fixture
def regular_user(db_session) -> User:
    return make_user(db_session, "testuser")


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return auth_header(admin_user)


@pytest.fixture
def user_headers(regular_user) -> dict:
    return auth_header(regular_user)
