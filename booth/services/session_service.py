"""Photo session business logic: burst upload, selection, sharing, expiry."""

import logging
from datetime import datetime, timedelta, timezone

from sqlmodel import Session, col, select

from booth.config import settings
from booth.models.session import PhotoSession, TempPhoto
from booth.utils.storage import LocalStorage, selected_photo_key, session_photo_key

logger = logging.getLogger(__name__)


def create_session(session: Session, session_name: str = "party-photo", device_id: str | None = None) -> PhotoSession:
    """Open a photo session that expires after the configured number of hours."""
    now = datetime.now(timezone.utc)
    photo_session = PhotoSession(
        session_name=session_name or "party-photo",
        device_id=device_id,
        created_at=now,
        expires_at=now + timedelta(hours=settings.photo_expire_hours),
    )
    session.add(photo_session)
    session.commit()
    session.refresh(photo_session)
    logger.info("Created photo session %s for device %s", photo_session.id, device_id)
    return photo_session


def get_session(session_id: str, session: Session) -> PhotoSession | None:
    """Return the session if it exists and has not expired."""
    now = datetime.now(timezone.utc)
    return session.exec(
        select(PhotoSession).where(
            PhotoSession.id == session_id,
            PhotoSession.expires_at > now,
        )
    ).first()


def save_temp_photos(
    session_id: str,
    photos: list[bytes],
    storage: LocalStorage,
    session: Session,
) -> list[TempPhoto]:
    """Store a burst of photos in capture order (photo_order 1..n).

    Either every photo is recorded or none: on failure the uploaded blobs
    are removed again.
    """
    if not get_session(session_id, session):
        raise LookupError(f"Session {session_id} not found or expired")

    uploaded: list[str] = []
    records: list[TempPhoto] = []
    try:
        for order, data in enumerate(photos, start=1):
            key = session_photo_key(session_id, order)
            url = storage.upload(data, key)
            uploaded.append(key)
            records.append(TempPhoto(
                session_id=session_id,
                photo_url=url,
                storage_key=key,
                photo_order=order,
            ))
        session.add_all(records)
        session.commit()
    except Exception:
        session.rollback()
        for key in uploaded:
            storage.delete(key)
        raise

    for r in records:
        session.refresh(r)
    logger.info("Saved %d photos for session %s", len(records), session_id)
    return records


def get_temp_photos(session_id: str, session: Session) -> list[TempPhoto]:
    return list(
        session.exec(
            select(TempPhoto)
            .where(TempPhoto.session_id == session_id)
            .order_by(col(TempPhoto.photo_order))
        ).all()
    )


def select_photo(
    session_id: str,
    photo_order: int,
    storage: LocalStorage,
    session: Session,
) -> PhotoSession:
    """Mark one burst photo as the keeper and copy it to the selected area."""
    photo_session = get_session(session_id, session)
    if not photo_session:
        raise LookupError(f"Session {session_id} not found or expired")

    photo = session.exec(
        select(TempPhoto).where(
            TempPhoto.session_id == session_id,
            TempPhoto.photo_order == photo_order,
        )
    ).first()
    if not photo:
        raise LookupError(f"Photo {photo_order} not found in session {session_id}")

    try:
        data = storage.read(photo.storage_key)
    except FileNotFoundError:
        raise LookupError(f"Photo file for {photo.id} is missing")

    key = selected_photo_key(session_id)
    url = storage.upload(data, key)

    previous_key = photo_session.selected_photo_key
    photo_session.selected_photo_key = key
    photo_session.selected_photo_url = url
    session.add(photo_session)
    session.commit()
    session.refresh(photo_session)

    if previous_key and previous_key != key:
        storage.delete(previous_key)
    return photo_session


def share_url(session_id: str) -> str:
    """Link encoded into the QR code shown after selection."""
    return f"{settings.public_base_url.rstrip('/')}/photo/{session_id}"


def increment_download_count(photo_session: PhotoSession, session: Session) -> None:
    photo_session.download_count += 1
    session.add(photo_session)
    session.commit()


def cleanup_expired_sessions(storage: LocalStorage, session: Session) -> int:
    """Delete expired sessions with their photos and blobs. Returns count removed."""
    now = datetime.now(timezone.utc)
    expired = session.exec(
        select(PhotoSession).where(PhotoSession.expires_at <= now)
    ).all()

    for photo_session in expired:
        for photo in get_temp_photos(photo_session.id, session):
            storage.delete(photo.storage_key)
            session.delete(photo)
        if photo_session.selected_photo_key:
            storage.delete(photo_session.selected_photo_key)
        session.delete(photo_session)

    session.commit()
    if expired:
        logger.info("Cleaned up %d expired photo sessions", len(expired))
    return len(expired)
