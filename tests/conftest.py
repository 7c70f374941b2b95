import os
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./test-unused.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.core.database import Base, enable_sqlite_foreign_keys, get_db

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_engine(tmp_path):
    url = f"sqlite:///{tmp_path / 'test.db'}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def TestingSessionLocal(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(autouse=True)
def override_di(TestingSessionLocal):
    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db(TestingSessionLocal):
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a fresh team and admin; returns the register response body plus headers."""
    def _register(team_name="Field Team", password="secret123"):
        email = f"admin-{uuid.uuid4().hex[:8]}@example.com"
        r = client.post("/api/auth/register", json={
            "email": email,
            "full_name": "Team Admin",
            "password": password,
            "team_name": team_name,
        })
        assert r.status_code == 201, r.text
        body = r.json()
        body["email"] = email
        body["password"] = password
        body["headers"] = {"Authorization": f"Bearer {body['access_token']}"}
        return body
    return _register


@pytest.fixture
def admin(register):
    return register()


@pytest.fixture
def auth_headers(admin):
    return admin["headers"]


@pytest.fixture
def template_payload():
    def _payload(status="active", name="Student Problem Discovery"):
        return {
            "name": name,
            "status": status,
            "category": "student",
            "questions": [
                {"key": "problems", "type": "ranking", "question_text": "Rate these problems", "order": 1},
                {"key": "satisfaction", "type": "rating", "question_text": "Satisfaction?", "order": 2},
                {"key": "interested_in_trying", "type": "multiple-choice",
                 "question_text": "Try it?", "order": 3},
            ],
        }
    return _payload


@pytest.fixture
def active_template(client, auth_headers, template_payload):
    r = client.post("/api/survey-templates", json=template_payload(), headers=auth_headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def candidate():
    """Build a response candidate as a field device would send it."""
    def _candidate(template_id, device_id=None, start_time=START, ratings=None, **extra):
        body = {
            "template_id": template_id,
            "client_id": uuid.uuid4().hex[:12],
            "device_info": {"device_id": device_id or f"device-{uuid.uuid4().hex[:8]}", "platform": "test"},
            "answers": {
                "problems": {"type": "ranking", "ratings": ratings or {"deadlines": 4, "exams": 5}},
                "satisfaction": {"type": "rating", "value": 3},
                "interested_in_trying": {"type": "multiple-choice", "value": "yes"},
            },
            "analytics": {
                "start_time": start_time.isoformat(),
                "end_time": (start_time + timedelta(minutes=5)).isoformat(),
                "completion_time_seconds": 300,
                "sections_completed": ["problems", "satisfaction"],
            },
        }
        body.update(extra)
        return body
    return _candidate
