"""Integration tests for the upload endpoint."""

from pathlib import Path

import pytest

from main import app
from models.config import settings
from services.upload_service import LocalStorage, get_storage_backend

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def upload_dir(client, tmp_path):
    """Point the storage backend at a temporary directory."""
    app.dependency_overrides[get_storage_backend] = lambda: LocalStorage(str(tmp_path))
    yield tmp_path
    app.dependency_overrides.pop(get_storage_backend, None)


class TestUpload:
    def test_upload_png(self, client, auth_headers, upload_dir):
        response = client.post(
            "/api/upload",
            files={"file": ("diagram.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "File uploaded successfully"
        data = body["data"]
        assert data["originalName"] == "diagram.png"
        assert data["fileSize"] == len(PNG_BYTES)
        assert data["mimeType"] == "image/png"
        assert data["filePath"] == f"/uploads/{data['filename']}"
        assert data["filename"].startswith("file-")
        assert (upload_dir / data["filename"]).read_bytes() == PNG_BYTES

    def test_upload_requires_auth(self, client, upload_dir):
        response = client.post(
            "/api/upload", files={"file": ("a.png", PNG_BYTES, "image/png")}
        )

        assert response.status_code == 401

    def test_missing_file(self, client, auth_headers, upload_dir):
        response = client.post("/api/upload", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "No file was uploaded."

    def test_disallowed_extension(self, client, auth_headers, upload_dir):
        response = client.post(
            "/api/upload",
            files={"file": ("script.exe", b"MZ", "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid file type.")
        assert list(Path(upload_dir).iterdir()) == []

    def test_mismatched_mime_type(self, client, auth_headers, upload_dir):
        response = client.post(
            "/api/upload",
            files={"file": ("photo.jpg", b"data", "text/html")},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_file_over_limit(self, client, auth_headers, upload_dir):
        oversized = b"0" * (settings.UPLOAD_MAX_BYTES + 1)

        response = client.post(
            "/api/upload",
            files={"file": ("big.pdf", oversized, "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File too large. Maximum size is 5MB."

    def test_uploaded_file_is_served(self, client, auth_headers):
        response = client.post(
            "/api/upload",
            files={"file": ("served.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )

        served = client.get(response.json()["data"]["filePath"])

        assert served.status_code == 200
        assert served.content == PNG_BYTES
