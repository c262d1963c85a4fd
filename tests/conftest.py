"""Shared test setup: temp dirs and instant capture timing, set before import."""

import os
import tempfile
from io import BytesIO

# Setup environment for testing
os.environ["PARTYBOOTH_DATA_DIR"] = tempfile.mkdtemp()
os.environ["PARTYBOOTH_STORAGE_DIR"] = tempfile.mkdtemp()
os.environ["PARTYBOOTH_DB_PATH"] = os.path.join(os.environ["PARTYBOOTH_DATA_DIR"], "test.db")
os.environ["PARTYBOOTH_PUBLIC_BASE_URL"] = "http://booth.test"
os.environ["PARTYBOOTH_COUNTDOWN_TICK_SECONDS"] = "0"
os.environ["PARTYBOOTH_SHOT_DELAY_SECONDS"] = "0"
os.environ["PARTYBOOTH_CAMERA_RETRY_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlmodel import Session

from booth.database import engine, init_db
from booth.main import app

init_db()


def make_jpeg(color=(200, 40, 90), size=(64, 48)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, "JPEG", quality=90)
    return buf.getvalue()


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c
