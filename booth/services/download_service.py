"""Download behaviour for the shared photo page.

Whether a device can save a file straight from an attachment response is a
platform question; the page tells us through ``ClientCapabilities`` rather
than us guessing from the user agent.
"""

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class ClientCapabilities:
    supports_auto_download: bool = True


def download_filename(timestamp_ms: int | None = None) -> str:
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"party-photo-{ts}.jpg"


def download_headers(capabilities: ClientCapabilities, size: int, timestamp_ms: int | None = None) -> dict[str, str]:
    """Response headers for a JPEG download.

    Devices that can auto-download get an attachment that is never cached;
    the rest get the image inline (save by long-press) with a short cache.
    """
    headers = {
        "Content-Type": "image/jpeg",
        "Content-Length": str(size),
    }
    if capabilities.supports_auto_download:
        headers["Content-Disposition"] = f'attachment; filename="{download_filename(timestamp_ms)}"'
        headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    else:
        headers["Content-Disposition"] = "inline"
        headers["Cache-Control"] = "public, max-age=3600"
    return headers
