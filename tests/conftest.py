import time
from dataclasses import replace
from typing import Callable, Dict, Iterator

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from task_api.db import Database
from task_api.main import create_app
from task_api.repositories import SQLiteTaskRepository
from task_api.settings import get_settings

TEST_SECRET = "test-secret-that-is-at-least-32-chars!!"

PAST_DATE = "2020-01-01"
FUTURE_DATE = "2099-12-31"


@pytest.fixture
def settings():
    return replace(get_settings(), sqlite_db_path=":memory:", jwt_secret=TEST_SECRET)


@pytest.fixture
def database() -> Iterator[Database]:
    db = Database(":memory:")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def repository(database):
    return SQLiteTaskRepository(database)


@pytest.fixture
def app(settings, database):
    return create_app(settings, database)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


def make_token(subject: str, secret: str = TEST_SECRET, **overrides) -> str:
    now = int(time.time())
    claims = {
        "sub": subject,
        "iss": "task-manager-api",
        "aud": "task-manager-api",
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def auth_headers() -> Callable[[str], Dict[str, str]]:
    def _headers(user: str = "alice") -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user)}"}

    return _headers


@pytest.fixture
def create_task(client, auth_headers):
    """POST /tasks as the given user and return the created task."""

    def _create(user: str = "alice", **fields):
        payload = {"title": "Test Task", **fields}
        res = client.post("/tasks", json=payload, headers=auth_headers(user))
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _create
