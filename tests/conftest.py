import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

SQLALCHEMY_DATABASE_URL = "sqlite:///./test_qrforge.db"
TEST_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
TEST_WEBHOOK_SECRET = "polar-test-secret"

os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["ENCRYPTION_KEY"] = TEST_ENCRYPTION_KEY
os.environ["POLAR_WEBHOOK_SECRET"] = TEST_WEBHOOK_SECRET
os.environ["POLAR_ACCESS_TOKEN"] = "polar-test-token"
os.environ["POLAR_PRODUCT_ID"] = "prod_test"
os.environ["PUBLIC_BASE_URL"] = "https://qr.example.com"
os.environ["LOG_TO_FILES"] = "false"
if os.path.exists("test_qrforge.db"):
    os.remove("test_qrforge.db")

from app.main import app  # noqa: E402
from app.core.jwt_auth import JWTAuth  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.models.billing import DynamicAccess  # noqa: E402

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.create_all(bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with TestingSessionLocal() as session:
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    with TestingSessionLocal() as session:
        yield session


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {JWTAuth.create_token(user_id)}"}


def grant_access(session, user_id: str, status: str = "active") -> DynamicAccess:
    access = DynamicAccess(user_id=user_id, status=status, subscription_id=f"sub_{user_id}", provider="polar")
    session.add(access)
    session.commit()
    return access


def make_qr_code(session, owner: str = None, **fields):
    """Insert a code directly; plaintext (legacy) unless told otherwise."""
    from app.models.qr_code import QRCode, UserToCode

    values = {"short_id": "abc123", "type": "text", "content": "hello", "is_encrypted": False}
    values.update(fields)
    qr_code = QRCode(**values)
    session.add(qr_code)
    session.flush()
    if owner:
        session.add(UserToCode(user_id=owner, qr_code_id=qr_code.id))
    session.commit()
    session.refresh(qr_code)
    return qr_code
