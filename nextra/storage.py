"""
nextra/storage.py

Pluggable file storage.

StorageService is the provider contract (upload / delete / url / exists);
LocalStorageService keeps files under a base directory and serves them
through the /uploads routes. S3, Azure and MinIO are recognised provider
names with no in-repo implementation.
"""

from __future__ import annotations

import re
import shutil
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from nextra.config import STORAGE_LOCAL_BASE_PATH, STORAGE_LOCAL_BASE_URL, STORAGE_PROVIDER
from nextra.errors import StorageError
from nextra.observability import get_logger

logger = get_logger(__name__)

# Folder names and file ids are single, plain path segments
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_-]+$")
_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


class StorageProvider(str, Enum):
    LOCAL = "local"
    S3 = "s3"
    AZURE = "azure"
    MINIO = "minio"


@dataclass(frozen=True)
class StorageResult:
    file_id: str
    original_filename: Optional[str]
    stored_filename: str
    public_url: str
    file_size: int
    content_type: Optional[str]
    provider: StorageProvider


class StorageService(ABC):
    @abstractmethod
    def upload_file(
        self,
        stream: BinaryIO,
        filename: Optional[str],
        content_type: Optional[str],
        folder: Optional[str] = None,
    ) -> StorageResult:
        ...

    @abstractmethod
    def delete_file(self, file_id: str) -> bool:
        """Remove the stored file; False when nothing matched."""

    @abstractmethod
    def get_file_url(self, file_id: str) -> Optional[str]:
        ...

    @abstractmethod
    def file_exists(self, file_id: str) -> bool:
        ...

    @abstractmethod
    def get_provider(self) -> StorageProvider:
        ...


class LocalStorageService(StorageService):
    """Files live at {base_path}/{folder}/{uuid}{ext}, public at {base_url}/uploads/{folder}/{file}."""

    def __init__(self, base_path: str | Path = STORAGE_LOCAL_BASE_PATH, base_url: str = STORAGE_LOCAL_BASE_URL):
        self.base_path = Path(base_path).resolve()
        self.base_url = base_url.rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_provider(self) -> StorageProvider:
        return StorageProvider.LOCAL

    def upload_file(
        self,
        stream: BinaryIO,
        filename: Optional[str],
        content_type: Optional[str],
        folder: Optional[str] = None,
    ) -> StorageResult:
        directory = self._directory(folder)
        file_id = str(uuid.uuid4())
        extension = Path(filename or "").suffix
        if not _SAFE_EXTENSION.match(extension):
            extension = ""
        stored_filename = f"{file_id}{extension}"
        target = directory / stored_filename

        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as out:
                shutil.copyfileobj(stream, out)
            size = target.stat().st_size
        except OSError as exc:
            logger.error("storage_write_failed", path=str(target), error=str(exc))
            target.unlink(missing_ok=True)
            raise StorageError("Failed to store file")

        if size == 0:
            target.unlink(missing_ok=True)
            raise StorageError("Failed to store empty file", status_code=400)

        relative = target.relative_to(self.base_path).as_posix()
        logger.info("file_stored", file_id=file_id, path=relative, size=size)
        return StorageResult(
            file_id=file_id,
            original_filename=filename,
            stored_filename=stored_filename,
            public_url=f"{self.base_url}/uploads/{relative}",
            file_size=size,
            content_type=content_type,
            provider=StorageProvider.LOCAL,
        )

    def delete_file(self, file_id: str) -> bool:
        path = self._find(file_id)
        if path is None:
            logger.info("file_delete_missing", file_id=file_id)
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.error("file_delete_failed", file_id=file_id, error=str(exc))
            raise StorageError("Failed to delete file")
        logger.info("file_deleted", file_id=file_id)
        return True

    def get_file_url(self, file_id: str) -> Optional[str]:
        path = self._find(file_id)
        if path is None:
            return None
        return f"{self.base_url}/uploads/{path.relative_to(self.base_path).as_posix()}"

    def file_exists(self, file_id: str) -> bool:
        return self._find(file_id) is not None

    def resolve_path(self, folder: Optional[str], filename: str) -> Optional[Path]:
        """Map a public /uploads path back to a file, refusing anything outside base_path."""
        if folder is not None and not _SAFE_SEGMENT.match(folder):
            return None
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            return None

        candidate = (self.base_path / folder / filename) if folder else (self.base_path / filename)
        candidate = candidate.resolve()
        if not candidate.is_relative_to(self.base_path) or not candidate.is_file():
            return None
        return candidate

    def _directory(self, folder: Optional[str]) -> Path:
        if not folder:
            return self.base_path
        if not _SAFE_SEGMENT.match(folder):
            raise StorageError(f"Invalid storage folder: {folder}", status_code=400)
        return self.base_path / folder

    def _find(self, file_id: str) -> Optional[Path]:
        if not file_id or not _SAFE_SEGMENT.match(file_id):
            return None
        for path in self.base_path.rglob(f"{file_id}*"):
            if path.is_file() and path.stem == file_id:
                return path
        return None


# ---------------------------------------------------------
# Provider selection
# ---------------------------------------------------------
def build_storage_service(provider: str = STORAGE_PROVIDER) -> StorageService:
    try:
        selected = StorageProvider(provider.lower())
    except ValueError:
        raise StorageError(f"Unknown storage provider: {provider}")

    if selected is StorageProvider.LOCAL:
        return LocalStorageService(STORAGE_LOCAL_BASE_PATH, STORAGE_LOCAL_BASE_URL)
    raise StorageError(f"Storage provider '{selected.value}' is not available")


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """FastAPI dependency returning the configured provider (built once)."""
    global _storage_service
    if _storage_service is None:
        _storage_service = build_storage_service()
    return _storage_service
