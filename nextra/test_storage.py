"""
nextra/test_storage.py

Local storage provider and the public /uploads file routes.

Run:
    pytest nextra/test_storage.py -v
"""

import io

import pytest

from nextra.errors import StorageError
from nextra.storage import LocalStorageService, StorageProvider, build_storage_service


class TestLocalStorageService:
    def test_upload_writes_file_and_builds_url(self, tmp_path):
        storage = LocalStorageService(tmp_path, "http://files.local/")

        result = storage.upload_file(io.BytesIO(b"png-bytes"), "front.PNG", "image/png", "properties")

        assert result.provider is StorageProvider.LOCAL
        assert result.stored_filename == f"{result.file_id}.PNG"
        assert result.file_size == 9
        assert result.original_filename == "front.PNG"
        assert result.public_url == f"http://files.local/uploads/properties/{result.file_id}.PNG"
        assert (tmp_path / "properties" / result.stored_filename).read_bytes() == b"png-bytes"

    def test_exists_url_and_delete(self, tmp_path):
        storage = LocalStorageService(tmp_path, "http://files.local")
        result = storage.upload_file(io.BytesIO(b"data"), "a.jpg", "image/jpeg")

        assert storage.file_exists(result.file_id)
        assert storage.get_file_url(result.file_id) == result.public_url

        assert storage.delete_file(result.file_id) is True
        assert not storage.file_exists(result.file_id)
        assert storage.get_file_url(result.file_id) is None

    def test_delete_missing_returns_false(self, tmp_path):
        storage = LocalStorageService(tmp_path, "http://files.local")
        assert storage.delete_file("does-not-exist") is False

    def test_empty_upload_rejected_and_not_kept(self, tmp_path):
        storage = LocalStorageService(tmp_path, "http://files.local")

        with pytest.raises(StorageError) as exc_info:
            storage.upload_file(io.BytesIO(b""), "empty.png", "image/png", "properties")

        assert exc_info.value.status_code == 400
        assert list((tmp_path / "properties").iterdir()) == []

    def test_unsafe_folder_rejected(self, tmp_path):
        storage = LocalStorageService(tmp_path, "http://files.local")
        with pytest.raises(StorageError):
            storage.upload_file(io.BytesIO(b"x"), "a.png", "image/png", "../escape")

    def test_unsafe_extension_dropped(self, tmp_path):
        storage = LocalStorageService(tmp_path, "http://files.local")
        result = storage.upload_file(io.BytesIO(b"x"), "weird.name.$$$", "image/png")
        assert result.stored_filename == result.file_id

    def test_resolve_path_refuses_traversal(self, tmp_path):
        storage = LocalStorageService(tmp_path / "root", "http://files.local")
        (tmp_path / "secret.txt").write_text("nope")

        assert storage.resolve_path(None, "..") is None
        assert storage.resolve_path("..", "secret.txt") is None
        assert storage.resolve_path(None, "../secret.txt") is None


class TestProviderSelection:
    def test_unknown_provider(self):
        with pytest.raises(StorageError):
            build_storage_service("ftp")

    def test_unimplemented_provider(self):
        with pytest.raises(StorageError) as exc_info:
            build_storage_service("s3")
        assert "not available" in exc_info.value.message


class TestFileServing:
    """GET /uploads/... serves stored files publicly."""

    def test_serves_file_in_folder(self, client, storage):
        result = storage.upload_file(io.BytesIO(b"\x89PNG"), "x.png", "image/png", "properties")

        response = client.get(f"/uploads/properties/{result.stored_filename}")

        assert response.status_code == 200
        assert response.content == b"\x89PNG"
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-disposition"].startswith("inline")

    def test_serves_root_file_with_fallback_type(self, client, storage):
        result = storage.upload_file(io.BytesIO(b"blob"), "data", None)

        response = client.get(f"/uploads/{result.stored_filename}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/octet-stream"

    def test_missing_file_is_404(self, client):
        response = client.get("/uploads/properties/missing.png")
        assert response.status_code == 404
        assert response.json()["message"] == "File not found"
