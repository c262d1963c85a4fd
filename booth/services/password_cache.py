"""Short-lived plaintext password reveal for freshly created devices.

The admin screen shows a new device's password once, right after creation,
so it can be written down. Only the bcrypt hash is persisted; the plaintext
lives in this cache until it is read or its TTL runs out, whichever comes
first. One instance is owned by the application (``app.state``) and handed
to request handlers through a dependency.
"""

import time
from dataclasses import dataclass, field
from typing import Callable

MASK = "••••••••"


@dataclass
class _Entry:
    password: str
    stored_at: float


@dataclass
class PasswordRevealCache:
    ttl_seconds: float
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _Entry] = field(default_factory=dict)

    def put(self, device_id: str, password: str) -> None:
        self._evict_expired()
        self._entries[device_id] = _Entry(password=password, stored_at=self.clock())

    def reveal(self, device_id: str) -> str | None:
        """Return the password once, then forget it."""
        self._evict_expired()
        entry = self._entries.pop(device_id, None)
        return entry.password if entry else None

    def __len__(self) -> int:
        self._evict_expired()
        return len(self._entries)

    def _evict_expired(self) -> None:
        now = self.clock()
        stale = [k for k, e in self._entries.items() if now - e.stored_at >= self.ttl_seconds]
        for k in stale:
            del self._entries[k]
