"""Photo blob storage on local disk, plus disk usage monitoring."""

import logging
import shutil
import time
from pathlib import Path

from booth.config import settings

logger = logging.getLogger(__name__)

FILES_URL_PREFIX = "/files"


class LocalStorage:
    """Stores photo blobs under a root directory; URLs are served at /files."""

    def __init__(self, root: Path, base_url: str = ""):
        self.root = root
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes, key: str) -> str:
        """Write ``data`` under ``key`` and return its public URL."""
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return self.url_for(key)

    def read(self, key: str) -> bytes:
        """Raises FileNotFoundError if the blob is gone."""
        return self._path(key).read_bytes()

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass

    def url_for(self, key: str) -> str:
        return f"{self.base_url}{FILES_URL_PREFIX}/{key}"

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Storage key escapes root: {key}")
        return path


def session_photo_key(session_id: str, order: int) -> str:
    """Key for one burst photo: sessions/<id>/photo-<n>-<ms>.jpg"""
    return f"sessions/{session_id}/photo-{order}-{int(time.time() * 1000)}.jpg"


def selected_photo_key(session_id: str) -> str:
    return f"selected/{session_id}/photo-{int(time.time() * 1000)}.jpg"


def get_storage() -> LocalStorage:
    return LocalStorage(settings.storage_dir, settings.public_base_url)


def get_storage_info() -> dict:
    """Get disk usage statistics for the storage directory."""
    usage = shutil.disk_usage(settings.storage_dir)
    return {
        "total_bytes": usage.total,
        "used_bytes": usage.used,
        "free_bytes": usage.free,
        "usage_percent": round(usage.used / usage.total * 100, 1),
    }
