"""PartyBooth Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "PartyBooth"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    public_base_url: str = "http://localhost:8080"

    # Paths
    data_dir: Path = Path.home() / "partybooth" / "data"
    storage_dir: Path = Path.home() / "partybooth" / "photos"

    # Database
    db_path: Path = Path.home() / "partybooth" / "data" / "partybooth.db"

    # Device tokens
    token_secret: str = ""
    token_algorithm: str = "HS256"
    token_expire_hours: int = 24

    # Admin
    admin_key: str = ""  # empty: admin routes are open
    password_reveal_ttl_seconds: int = 300

    # Capture choreography
    countdown_from: int = 5
    shot_count: int = 3
    countdown_tick_seconds: float = 1.0
    shot_delay_seconds: float = 1.0  # pause between shots for re-posing
    camera_retry_seconds: float = 1.0
    jpeg_quality: int = 90

    # Photo sessions
    photo_expire_hours: int = 24
    max_upload_bytes: int = 20 * 1024 * 1024

    model_config = {"env_prefix": "PARTYBOOTH_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.storage_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the token secret if not set, persist it so tokens survive restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.token_secret:
            self.token_secret = saved.get("token_secret", "") or secrets.token_urlsafe(32)

        secrets_file.write_text(f"token_secret={self.token_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
