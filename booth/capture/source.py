"""Video sources the capture sequencer can grab still frames from.

The camera itself lives in the browser (getUserMedia). The booth page pushes
preview frames over the capture WebSocket and the server keeps the latest
one; grabbing a "current frame" means taking that latest picture.
"""

import logging
import threading
from typing import Protocol

from PIL import Image

from booth.capture.events import CameraUnavailable
from booth.utils.image import decode_image

logger = logging.getLogger(__name__)


class VideoSource(Protocol):
    def open(self) -> None:
        """Acquire the source. May raise CameraUnavailable."""

    def is_ready(self) -> bool:
        """True when a frame can be read right now."""

    def read_frame(self) -> Image.Image | None:
        """Current frame as a raster image, or None if there is none."""

    def release(self) -> None:
        """Give the source back."""


class FrameBufferSource:
    """Holds the most recent frame pushed by the client."""

    def __init__(self, max_frame_bytes: int = 8 * 1024 * 1024):
        self._lock = threading.Lock()
        self._latest: Image.Image | None = None
        self._opened = False
        self._max_frame_bytes = max_frame_bytes

    def open(self) -> None:
        with self._lock:
            self._opened = True

    def is_ready(self) -> bool:
        with self._lock:
            return self._opened and self._latest is not None

    def push(self, data: bytes) -> None:
        """Store a new preview frame. Raises ValueError on undecodable data."""
        if len(data) > self._max_frame_bytes:
            raise ValueError("Frame too large")
        try:
            img = decode_image(data)
        except OSError as e:
            raise ValueError(f"Invalid frame: {e}") from e
        with self._lock:
            self._latest = img

    def read_frame(self) -> Image.Image | None:
        with self._lock:
            if not self._opened:
                raise CameraUnavailable("Source has been released")
            return self._latest.copy() if self._latest is not None else None

    def release(self) -> None:
        with self._lock:
            self._opened = False
            self._latest = None
        logger.debug("Frame buffer released")


class StillImageSource:
    """Serves the same picture for every grab (kiosk test pattern, tests)."""

    def __init__(self, image: Image.Image):
        self._image = image
        self._opened = False

    def open(self) -> None:
        self._opened = True

    def is_ready(self) -> bool:
        return self._opened

    def read_frame(self) -> Image.Image | None:
        return self._image.copy() if self._opened else None

    def release(self) -> None:
        self._opened = False
