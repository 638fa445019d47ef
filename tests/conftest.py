import os

# Must be in place before anything imports core.config / database.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production-use-0123456789"
os.environ["ENVIRONMENT"] = "development"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models.inquiry  # noqa: F401, E402
import models.session  # noqa: F401, E402
import models.user  # noqa: F401, E402
from auth.credentials import create_user  # noqa: E402
from database import Base, SessionLocal, engine, store_status  # noqa: E402

PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    store_status.available = True
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_user(db):
    return create_user(db, "admin1", "admin1@example.com", PASSWORD, role="admin")


@pytest.fixture
def super_admin(db):
    return create_user(db, "owner", "owner@example.com", PASSWORD, role="super_admin")


def login(client, identifier, password=PASSWORD):
    return client.post(
        "/admin/login",
        data={"identifier": identifier, "password": password},
        follow_redirects=False,
    )
