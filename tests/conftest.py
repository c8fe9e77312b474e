"""Shared fixtures: every test gets its own upload dir, index file and app."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pinshare.core.config import Settings
from pinshare.main import create_app
from pinshare.services.filestore import FileService
from pinshare.services.index import MetadataIndex

ROOT = Path(__file__).resolve().parents[1]
PIN = "4321"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        LOGIN_PIN=PIN,
        SESSION_SECRET_KEY="test-secret",
        SESSION_TTL_SECONDS=3600,
        COOKIE_SECURE=False,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        METADATA_FILE=str(tmp_path / "filedata.json"),
        MAX_UPLOAD_BYTES=1024 * 1024,
        LOGIN_RATE_LIMIT=5,
        LOGIN_RATE_WINDOW_SECONDS=60,
        STATIC_DIR=str(ROOT / "public"),
        LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
def service(settings) -> FileService:
    index = MetadataIndex(settings.METADATA_FILE, settings.UPLOAD_DIR)
    return FileService(settings.UPLOAD_DIR, index, settings.MAX_UPLOAD_BYTES).init()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def authed(client):
    resp = client.post("/login", json={"pin": PIN})
    assert resp.status_code == 200
    return client
