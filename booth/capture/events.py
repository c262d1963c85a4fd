"""Frames, sequencer events and capture errors."""

import base64
from dataclasses import dataclass, field
from typing import Any


class CaptureError(Exception):
    reason = "capture_error"


class CameraUnavailable(CaptureError):
    reason = "camera_unavailable"


class CaptureFailed(CaptureError):
    reason = "capture_failed"


@dataclass(frozen=True)
class Frame:
    index: int  # 1-based capture order
    data: bytes
    width: int
    height: int
    quality: int = 90
    mime_type: str = "image/jpeg"

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "mime_type": self.mime_type,
            "quality": self.quality,
            "width": self.width,
            "height": self.height,
            "data": base64.b64encode(self.data).decode("ascii"),
        }


@dataclass
class SequencerEvent:
    phase: str  # countdown | capturing | captured | pausing | done | error
    payload: dict[str, Any] = field(default_factory=dict)
    frames: list[Frame] = field(default_factory=list)
    message: str | None = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"phase": self.phase, "payload": self.payload}
        if self.phase == "done":
            out["frames"] = [f.to_dict() for f in self.frames]
        if self.message is not None:
            out["message"] = self.message
        return out


# User-facing guidance per failure kind
ERROR_MESSAGES = {
    CameraUnavailable.reason: (
        "Camera is not available. Allow camera access in the browser settings "
        "and make sure no other application is using it."
    ),
    CaptureFailed.reason: "Taking the photo failed. Please try again.",
}
