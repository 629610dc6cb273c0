"""
nextra/domains/property/images.py

Property image-list management.

A property holds an ordered list of public image URLs plus a main-image
pointer. Rules:
- at most MAX_IMAGES_PER_PROPERTY images; an upload batch that would exceed
  the cap is rejected as a whole
- every file in a batch is validated (non-empty, image/*, size cap) before
  anything is written to storage
- the main image is only assigned on upload when none is set yet
- removing the main image promotes the next image (or clears the pointer)

Each operation loads the row FOR UPDATE and commits once, so concurrent
requests on the same property cannot lose each other's list changes.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from fastapi import Depends, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nextra.config import MAX_IMAGE_BYTES, MAX_IMAGES_PER_PROPERTY
from nextra.db import get_session
from nextra.errors import BadRequest, ResourceNotFound, StorageError
from nextra.models import Property
from nextra.observability import get_logger
from nextra.repository import BaseRepository
from nextra.storage import StorageResult, StorageService, get_storage_service

logger = get_logger(__name__)

PROPERTY_IMAGE_FOLDER = "properties"


def file_id_from_url(image_url: str) -> str:
    """Stored file id is the URL's last path segment without its extension."""
    return PurePosixPath(urlparse(image_url).path).stem


def upload_size(upload: UploadFile) -> int:
    stream = upload.file
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(0)
    return size


class PropertyImageService:
    def __init__(self, session: Session, storage: StorageService):
        self.session = session
        self.storage = storage
        self.repository: BaseRepository[Property] = BaseRepository(session, Property)

    # -----------------------------------------------------
    # Upload
    # -----------------------------------------------------
    def upload_images(
        self,
        property_id: int,
        files: Sequence[UploadFile],
        set_as_main: bool,
        actor: str,
    ) -> Property:
        prop = self._load(property_id)
        if not files:
            raise BadRequest("No files provided")

        current = list(prop.images or [])
        if len(current) + len(files) > MAX_IMAGES_PER_PROPERTY:
            raise BadRequest(
                f"Cannot upload {len(files)} images: property already has {len(current)} "
                f"of {MAX_IMAGES_PER_PROPERTY} allowed"
            )
        for upload in files:
            self._validate(upload)

        stored: List[StorageResult] = []
        try:
            for upload in files:
                stored.append(
                    self.storage.upload_file(upload.file, upload.filename, upload.content_type, PROPERTY_IMAGE_FOLDER)
                )
            urls = [result.public_url for result in stored]
            prop.images = current + urls
            if set_as_main and not prop.main_image:
                prop.main_image = urls[0]
            self.repository.touch(prop, actor)
            self.session.commit()
        except (StorageError, SQLAlchemyError, OSError):
            self.session.rollback()
            self._discard(stored)
            raise

        logger.info("property_images_uploaded", property_id=property_id, count=len(stored), actor=actor)
        return prop

    def _validate(self, upload: UploadFile) -> None:
        name = upload.filename or "unnamed"
        size = upload_size(upload)
        if size == 0:
            raise BadRequest(f"File '{name}' is empty")
        content_type = (upload.content_type or "").lower()
        if not content_type.startswith("image/"):
            raise BadRequest(f"File '{name}' is not an image (content type: {upload.content_type})")
        if size > MAX_IMAGE_BYTES:
            raise BadRequest(f"File '{name}' exceeds the maximum size of {MAX_IMAGE_BYTES // (1024 * 1024)}MB")

    def _discard(self, stored: Sequence[StorageResult]) -> None:
        for result in stored:
            try:
                self.storage.delete_file(result.file_id)
            except StorageError:
                logger.warning("orphan_image_cleanup_failed", file_id=result.file_id)

    # -----------------------------------------------------
    # Main image
    # -----------------------------------------------------
    def set_main_image(self, property_id: int, image_url: str, actor: str) -> Property:
        prop = self._load(property_id)
        if image_url not in (prop.images or []):
            raise BadRequest("Image URL does not belong to this property")
        prop.main_image = image_url
        self._commit(prop, actor)
        return prop

    # -----------------------------------------------------
    # Delete
    # -----------------------------------------------------
    def delete_image(self, property_id: int, image_url: str, actor: str) -> Property:
        prop = self._load(property_id)
        images = list(prop.images or [])
        if image_url not in images:
            return prop

        images.remove(image_url)
        prop.images = images
        if prop.main_image == image_url:
            prop.main_image = images[0] if images else None

        self._commit(prop, actor)
        self.storage.delete_file(file_id_from_url(image_url))
        logger.info("property_image_deleted", property_id=property_id, actor=actor)
        return prop

    def delete_all_images(self, property_id: int, actor: str) -> Property:
        prop = self._load(property_id)
        urls = list(prop.images or [])
        prop.images = []
        prop.main_image = None
        self._commit(prop, actor)

        failed = 0
        for url in urls:
            try:
                self.storage.delete_file(file_id_from_url(url))
            except StorageError:
                failed += 1
                logger.warning("property_image_delete_failed", property_id=property_id, image_url=url)

        logger.info("property_images_cleared", property_id=property_id, count=len(urls), failed=failed, actor=actor)
        return prop

    # -----------------------------------------------------
    # Helpers
    # -----------------------------------------------------
    def _load(self, property_id: int) -> Property:
        prop: Optional[Property] = self.repository.get(property_id, for_update=True)
        if prop is None:
            raise ResourceNotFound(f"Property not found with id: {property_id}")
        return prop

    def _commit(self, prop: Property, actor: str) -> None:
        self.repository.touch(prop, actor)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise


def get_property_image_service(
    session: Session = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> PropertyImageService:
    return PropertyImageService(session, storage)
