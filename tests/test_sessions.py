"""Photo sessions: burst upload, selection, share link, download behaviour, expiry."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from booth.config import settings
from booth.models.session import PhotoSession
from booth.services.download_service import ClientCapabilities, download_headers
from booth.services.session_service import (
    cleanup_expired_sessions,
    create_session,
    get_session,
    get_temp_photos,
    save_temp_photos,
)
from booth.utils.storage import LocalStorage

from conftest import make_jpeg


@pytest.fixture(scope="module")
def auth_headers(client):
    device_id = f"BOOTH-{uuid.uuid4().hex[:6]}"
    client.post("/api/v1/admin/devices", json={
        "deviceId": device_id, "password": "secret", "deviceName": "Hall booth",
    })
    token = client.post("/api/v1/auth/login", json={
        "deviceId": device_id, "password": "secret",
    }).json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path, "http://booth.test")


# --- Download policy ---

class TestDownloadHeaders:
    def test_auto_download_gets_attachment(self):
        h = download_headers(ClientCapabilities(supports_auto_download=True), 1234, timestamp_ms=42)

        assert h["Content-Disposition"] == 'attachment; filename="party-photo-42.jpg"'
        assert h["Cache-Control"] == "no-cache, no-store, must-revalidate"
        assert h["Content-Type"] == "image/jpeg"
        assert h["Content-Length"] == "1234"

    def test_no_auto_download_gets_inline(self):
        h = download_headers(ClientCapabilities(supports_auto_download=False), 10)

        assert h["Content-Disposition"] == "inline"
        assert h["Cache-Control"] == "public, max-age=3600"


# --- Storage ---

class TestLocalStorage:
    def test_upload_read_delete(self, storage):
        url = storage.upload(b"jpeg-bytes", "sessions/s1/photo-1.jpg")

        assert url == "http://booth.test/files/sessions/s1/photo-1.jpg"
        assert storage.read("sessions/s1/photo-1.jpg") == b"jpeg-bytes"

        storage.delete("sessions/s1/photo-1.jpg")
        with pytest.raises(FileNotFoundError):
            storage.read("sessions/s1/photo-1.jpg")

    def test_key_cannot_escape_root(self, storage):
        with pytest.raises(ValueError):
            storage.upload(b"x", "../outside.jpg")


# --- Service ---

class TestSessionService:
    def test_photos_keep_capture_order(self, db, storage):
        photo_session = create_session(db, "reunion", "DEV1")
        blobs = [make_jpeg((i * 60, 0, 0)) for i in range(1, 4)]

        save_temp_photos(photo_session.id, blobs, storage, db)

        photos = get_temp_photos(photo_session.id, db)
        assert [p.photo_order for p in photos] == [1, 2, 3]
        assert [storage.read(p.storage_key) for p in photos] == blobs

    def test_failed_upload_leaves_nothing_behind(self, db, storage, monkeypatch):
        photo_session = create_session(db)
        calls = []
        real_upload = storage.upload

        def flaky_upload(data, key):
            calls.append(key)
            if len(calls) == 3:
                raise OSError("disk full")
            return real_upload(data, key)

        monkeypatch.setattr(storage, "upload", flaky_upload)

        with pytest.raises(OSError):
            save_temp_photos(photo_session.id, [b"1", b"2", b"3"], storage, db)

        assert get_temp_photos(photo_session.id, db) == []
        for key in calls[:2]:
            with pytest.raises(FileNotFoundError):
                storage.read(key)

    def test_expired_session_is_hidden_and_cleaned(self, db, storage):
        now = datetime.now(timezone.utc)
        expired = PhotoSession(
            session_name="old",
            created_at=now - timedelta(hours=30),
            expires_at=now - timedelta(hours=6),
        )
        db.add(expired)
        db.commit()
        db.refresh(expired)
        expired_id = expired.id
        live = create_session(db)

        assert get_session(expired_id, db) is None
        assert get_session(live.id, db) is not None

        removed = cleanup_expired_sessions(storage, db)

        assert removed >= 1
        assert db.get(PhotoSession, expired_id) is None
        assert db.get(PhotoSession, live.id) is not None

    def test_save_into_unknown_session(self, db, storage):
        with pytest.raises(LookupError):
            save_temp_photos("ses_missing", [b"x"], storage, db)


# --- HTTP surface ---

class TestSessionApi:
    def test_requires_device_token(self, client):
        r = client.post("/api/v1/sessions", json={"sessionName": "party"})
        assert r.status_code in (401, 403)

        r = client.post(
            "/api/v1/sessions",
            json={"sessionName": "party"},
            headers={"Authorization": "Bearer garbage"},
        )
        assert r.status_code == 401

    def test_capture_to_download_flow(self, client, auth_headers):
        r = client.post("/api/v1/sessions", json={"sessionName": "party"}, headers=auth_headers)
        assert r.status_code == 200, r.text
        session_id = r.json()["sessionId"]

        blobs = [make_jpeg((i * 70, 100, 30)) for i in range(1, 4)]
        r = client.post(
            f"/api/v1/sessions/{session_id}/photos",
            files=[("files", (f"{i}.jpg", b, "image/jpeg")) for i, b in enumerate(blobs, start=1)],
            headers=auth_headers,
        )
        assert r.status_code == 200, r.text
        photos = r.json()["photos"]
        assert [p["photoOrder"] for p in photos] == [1, 2, 3]

        r = client.post(f"/api/v1/sessions/{session_id}/select", json={"order": 2}, headers=auth_headers)
        assert r.status_code == 200, r.text
        assert r.json()["shareUrl"] == f"{settings.public_base_url}/photo/{session_id}"
        assert "/files/selected/" in r.json()["photoUrl"]

        r = client.get(f"/api/v1/sessions/{session_id}/download")
        assert r.status_code == 200
        assert r.content == blobs[1]
        assert r.headers["content-disposition"].startswith("attachment;")

        r = client.get(f"/api/v1/sessions/{session_id}/download", params={"auto_download": "false"})
        assert r.status_code == 200
        assert r.headers["content-disposition"] == "inline"

        r = client.get(f"/api/v1/sessions/{session_id}")
        data = r.json()
        assert data["downloadCount"] == 2
        assert data["selectedPhotoUrl"]
        assert [p["photoOrder"] for p in data["photos"]] == [1, 2, 3]

    def test_too_many_photos(self, client, auth_headers):
        session_id = client.post("/api/v1/sessions", json={}, headers=auth_headers).json()["sessionId"]
        files = [("files", (f"{i}.jpg", make_jpeg(), "image/jpeg")) for i in range(settings.shot_count + 1)]

        r = client.post(f"/api/v1/sessions/{session_id}/photos", files=files, headers=auth_headers)
        assert r.status_code == 400

    def test_download_before_selection(self, client, auth_headers):
        session_id = client.post("/api/v1/sessions", json={}, headers=auth_headers).json()["sessionId"]

        r = client.get(f"/api/v1/sessions/{session_id}/download")
        assert r.status_code == 404

    def test_select_missing_photo(self, client, auth_headers):
        session_id = client.post("/api/v1/sessions", json={}, headers=auth_headers).json()["sessionId"]

        r = client.post(f"/api/v1/sessions/{session_id}/select", json={"order": 1}, headers=auth_headers)
        assert r.status_code == 404

    def test_unknown_session(self, client):
        assert client.get("/api/v1/sessions/ses_nope").status_code == 404

    def test_config_check_hides_secrets(self, client):
        r = client.get("/api/v1/system/config")
        assert r.status_code == 200
        body = r.json()
        assert body["config"]["token_secret_configured"] is True
        assert settings.token_secret not in r.text
