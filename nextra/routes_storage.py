"""
nextra/routes_storage.py

Public file serving for locally stored uploads:
    GET /uploads/{filename}
    GET /uploads/{folder}/{filename}

Content type is guessed from the file name (application/octet-stream when
unknown) and files are served inline.
"""

from __future__ import annotations

import mimetypes
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from nextra.errors import ResourceNotFound, StorageError
from nextra.observability import get_logger
from nextra.storage import LocalStorageService, StorageService, get_storage_service

logger = get_logger(__name__)

router = APIRouter(prefix="/uploads", tags=["storage"])


def _serve(storage: StorageService, folder: Optional[str], filename: str) -> Response:
    if not isinstance(storage, LocalStorageService):
        raise ResourceNotFound("File not found")

    path = storage.resolve_path(folder, filename)
    if path is None:
        raise ResourceNotFound("File not found")

    try:
        content = path.read_bytes()
    except OSError as exc:
        logger.error("file_read_failed", path=str(path), error=str(exc))
        raise StorageError("Could not read file")

    media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'inline; filename="{path.name}"'},
    )


@router.get("/{filename}")
def serve_file(filename: str, storage: StorageService = Depends(get_storage_service)) -> Response:
    return _serve(storage, None, filename)


@router.get("/{folder}/{filename}")
def serve_folder_file(
    folder: str,
    filename: str,
    storage: StorageService = Depends(get_storage_service),
) -> Response:
    return _serve(storage, folder, filename)
