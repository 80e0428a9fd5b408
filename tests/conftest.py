import base64
import os
import tempfile

# app.main builds a module-level app from the environment on import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="goat-uploads-"))

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


def data_url(payload: bytes, media_type: str = "image/jpeg") -> str:
    return f"data:{media_type};base64,{base64.b64encode(payload).decode()}"


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def app(upload_dir):
    settings = Settings(DATABASE_URL="sqlite://", UPLOAD_DIR=str(upload_dir))
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def farmer(client):
    resp = client.post(
        "/register",
        json={
            "email": "a@b.com",
            "password": "pw",
            "farmName": "F",
            "address": "X",
        },
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def goat_payload(farmer):
    return {
        "rfidTag": "T1",
        "name": "G1",
        "gender": "Male",
        "breed": "B",
        "birthDate": "2020-01-01",
        "weight": 10,
        "height": 20,
        "owner": farmer["id"],
    }


@pytest.fixture
def file_app(tmp_path, upload_dir):
    """App on an on-disk SQLite file, for requests running in parallel threads."""
    settings = Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'goats.db'}",
        UPLOAD_DIR=str(upload_dir),
    )
    return create_app(settings)


@pytest.fixture
def file_client(file_app):
    with TestClient(file_app) as c:
        yield c
