"""
nextra/test_property_images.py

Property image-list management over HTTP.

Tests:
1. Upload stores files and sets the main image when none is set
2. Batches are validated before anything is written
3. The 10-image cap rejects a whole batch
4. Main-image selection and reassignment on delete
5. Delete-all clears the list and the stored files
6. Storage failures: partial batches are cleaned up, delete-all keeps going

Run:
    pytest nextra/test_property_images.py -v
"""

import io

import pytest
from sqlalchemy.exc import SQLAlchemyError

from nextra.config import MAX_IMAGE_BYTES
from nextra.domains.property.images import PropertyImageService, file_id_from_url
from nextra.errors import StorageError
from nextra.models import Property


def png(name="photo.png", content=b"\x89PNG fake image"):
    return ("files", (name, content, "image/png"))


def new_property(session, images=None):
    prop = Property(title="Townhouse", price=200000, images=list(images or []))
    session.add(prop)
    session.commit()
    return prop.id


def upload(client, headers, property_id, *files, set_as_main=True):
    return client.post(
        f"/api/properties/{property_id}/images?setAsMain={str(set_as_main).lower()}",
        files=list(files),
        headers=headers,
    )


class TestImageUpload:
    def test_upload_sets_main_image(self, client, agent_headers, session, storage):
        property_id = new_property(session)

        response = upload(client, agent_headers, property_id, png("a.png"), png("b.png"))

        assert response.status_code == 200, f"Expected 200, got {response.status_code}: {response.json()}"
        body = response.json()
        assert body["message"] == "Images uploaded"
        data = body["data"]
        assert len(data["images"]) == 2
        assert data["mainImage"] == data["images"][0]
        assert all(url.startswith("http://testserver/uploads/properties/") for url in data["images"])
        assert all(storage.file_exists(file_id_from_url(url)) for url in data["images"])

    def test_existing_main_image_is_kept(self, client, agent_headers, session):
        property_id = new_property(session)
        first = upload(client, agent_headers, property_id, png()).json()["data"]["mainImage"]

        data = upload(client, agent_headers, property_id, png("second.png")).json()["data"]

        assert data["mainImage"] == first
        assert len(data["images"]) == 2

    def test_set_as_main_false_leaves_pointer_empty(self, client, agent_headers, session):
        property_id = new_property(session)
        data = upload(client, agent_headers, property_id, png(), set_as_main=False).json()["data"]
        assert data["mainImage"] is None

    def test_non_image_rejects_whole_batch(self, client, agent_headers, session, storage):
        property_id = new_property(session)

        response = upload(
            client,
            agent_headers,
            property_id,
            png("ok.png"),
            ("files", ("notes.txt", b"plain text", "text/plain")),
        )

        assert response.status_code == 400
        assert "not an image" in response.json()["message"]
        assert not (storage.base_path / "properties").exists() or not any((storage.base_path / "properties").iterdir())
        session.expire_all()
        assert session.get(Property, property_id).images == []

    def test_empty_file_rejected(self, client, agent_headers, session):
        property_id = new_property(session)
        response = upload(client, agent_headers, property_id, png("empty.png", b""))
        assert response.status_code == 400
        assert "is empty" in response.json()["message"]

    def test_cap_of_ten_images(self, client, agent_headers, session):
        existing = [f"http://testserver/uploads/properties/old-{i}.png" for i in range(6)]
        property_id = new_property(session, existing)

        response = upload(client, agent_headers, property_id, *[png(f"{i}.png") for i in range(5)])

        assert response.status_code == 400
        session.expire_all()
        assert len(session.get(Property, property_id).images) == 6

    def test_unknown_property_is_404(self, client, agent_headers):
        response = upload(client, agent_headers, 4040, png())
        assert response.status_code == 404

    def test_normal_user_forbidden(self, client, normal_headers, session):
        property_id = new_property(session)
        response = upload(client, normal_headers, property_id, png())
        assert response.status_code == 403


class TestMainImage:
    def test_set_main_image(self, client, agent_headers, session):
        property_id = new_property(session)
        images = upload(client, agent_headers, property_id, png("a.png"), png("b.png")).json()["data"]["images"]

        response = client.put(
            f"/api/properties/{property_id}/images/main",
            params={"imageUrl": images[1]},
            headers=agent_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["mainImage"] == images[1]

    def test_foreign_url_rejected(self, client, agent_headers, session):
        property_id = new_property(session)
        upload(client, agent_headers, property_id, png())

        response = client.put(
            f"/api/properties/{property_id}/images/main",
            params={"imageUrl": "http://elsewhere/x.png"},
            headers=agent_headers,
        )

        assert response.status_code == 400


class TestImageDelete:
    def test_deleting_main_promotes_next(self, client, agent_headers, session, storage):
        property_id = new_property(session)
        images = upload(client, agent_headers, property_id, png("a.png"), png("b.png")).json()["data"]["images"]

        response = client.delete(
            f"/api/properties/{property_id}/images",
            params={"imageUrl": images[0]},
            headers=agent_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["images"] == [images[1]]
        assert data["mainImage"] == images[1]
        assert not storage.file_exists(file_id_from_url(images[0]))

    def test_deleting_last_image_clears_main(self, client, agent_headers, session):
        property_id = new_property(session)
        images = upload(client, agent_headers, property_id, png()).json()["data"]["images"]

        data = client.delete(
            f"/api/properties/{property_id}/images",
            params={"imageUrl": images[0]},
            headers=agent_headers,
        ).json()["data"]

        assert data["images"] == []
        assert data["mainImage"] is None

    def test_deleting_unknown_url_is_noop(self, client, agent_headers, session):
        property_id = new_property(session)
        images = upload(client, agent_headers, property_id, png()).json()["data"]["images"]

        response = client.delete(
            f"/api/properties/{property_id}/images",
            params={"imageUrl": "http://testserver/uploads/properties/other.png"},
            headers=agent_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["images"] == images

    def test_delete_all(self, client, agent_headers, session, storage):
        property_id = new_property(session)
        images = upload(client, agent_headers, property_id, png("a.png"), png("b.png")).json()["data"]["images"]

        response = client.delete(f"/api/properties/{property_id}/images/all", headers=agent_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["images"] == []
        assert data["mainImage"] is None
        assert not any(storage.file_exists(file_id_from_url(url)) for url in images)


def stored_files(storage):
    folder = storage.base_path / "properties"
    return sorted(folder.iterdir()) if folder.exists() else []


class TestStorageFailures:
    """Storage errors never leave the image list and the stored files out of step."""

    def test_oversized_file_rejects_batch(self, client, agent_headers, session, storage):
        property_id = new_property(session)

        response = upload(
            client,
            agent_headers,
            property_id,
            png("small.png"),
            png("big.png", b"\x00" * (MAX_IMAGE_BYTES + 1)),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File 'big.png' exceeds the maximum size of 10MB"
        assert stored_files(storage) == []
        session.expire_all()
        assert session.get(Property, property_id).images == []

    def test_failed_upload_discards_stored_files(self, client, agent_headers, session, storage, monkeypatch):
        property_id = new_property(session)
        real_upload = storage.upload_file
        calls = []

        def flaky_upload(*args, **kwargs):
            calls.append(args[1])
            if len(calls) == 2:
                raise StorageError("disk full")
            return real_upload(*args, **kwargs)

        monkeypatch.setattr(storage, "upload_file", flaky_upload)

        response = upload(client, agent_headers, property_id, png("a.png"), png("b.png"), png("c.png"))

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "disk full", "data": None}
        assert calls == ["a.png", "b.png"]
        assert stored_files(storage) == []
        session.expire_all()
        assert session.get(Property, property_id).images == []

    def test_delete_all_continues_after_failure(self, client, agent_headers, session, storage, monkeypatch):
        property_id = new_property(session)
        images = upload(
            client, agent_headers, property_id, png("a.png"), png("b.png"), png("c.png")
        ).json()["data"]["images"]
        real_delete = storage.delete_file
        attempted = []

        def flaky_delete(file_id):
            attempted.append(file_id)
            if len(attempted) == 1:
                raise StorageError("Failed to delete file")
            return real_delete(file_id)

        monkeypatch.setattr(storage, "delete_file", flaky_delete)

        response = client.delete(f"/api/properties/{property_id}/images/all", headers=agent_headers)

        assert response.status_code == 200
        assert response.json()["data"]["images"] == []
        assert response.json()["data"]["mainImage"] is None
        assert attempted == [file_id_from_url(url) for url in images]
        assert [storage.file_exists(file_id) for file_id in attempted] == [True, False, False]

    def test_failed_commit_keeps_stored_file(self, session, storage, monkeypatch):
        stored = storage.upload_file(io.BytesIO(b"img"), "a.png", "image/png", "properties")
        property_id = new_property(session, [stored.public_url])
        service = PropertyImageService(session, storage)

        def failing_commit():
            raise SQLAlchemyError("commit failed")

        monkeypatch.setattr(session, "commit", failing_commit)

        with pytest.raises(SQLAlchemyError):
            service.delete_image(property_id, stored.public_url, "agent")

        assert storage.file_exists(stored.file_id)
        monkeypatch.undo()
        session.expire_all()
        assert session.get(Property, property_id).images == [stored.public_url]
