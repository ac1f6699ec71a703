from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./gradtrack_test.db")
os.environ.setdefault("APP_ENV", "test")
os.environ["LLM_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from gradtrack.api.app import create_app
from gradtrack.db.base import Base
from gradtrack.db import models  # noqa: F401
from gradtrack.db.session import engine


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())
