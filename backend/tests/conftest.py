import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from survey_api.database import Base, get_db
from survey_api.main import app
from survey_api.models.user import User
from survey_api.services.auth_service import hash_password

TEST_DB_URL = "sqlite:///./test_surveys.db"
TEST_PASSWORD = "secret123"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    password_hash = hash_password(TEST_PASSWORD)
    users = {
        "teacher": User(email="teacher@example.com", name="Teacher", role="teacher", password_hash=password_hash),
        "teacher2": User(email="teacher2@example.com", name="Other Teacher", role="teacher", password_hash=password_hash),
        "student": User(email="student@example.com", name="Student", role="student", password_hash=password_hash),
        "student2": User(email="student2@example.com", name="Another Student", role="student", password_hash=password_hash),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def get_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}


def create_survey(client, headers: dict, **overrides) -> dict:
    payload = {
        "title": "Colours",
        "description": "Favourite things",
        "isPublic": True,
        "questions": [
            {"text": "Favourite colour?", "type": "SINGLE_CHOICE", "choices": [{"text": "Red"}, {"text": "Blue"}]},
            {"text": "Why?", "type": "TEXT"},
        ],
    }
    payload.update(overrides)
    resp = client.post("/api/surveys", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
