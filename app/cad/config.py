import os
from dataclasses import dataclass
from typing import Any

DEFAULT_LOGO_MAX_BYTES = 2 * 1024 * 1024
MAX_REQUEST_BYTES = 10 * 1024 * 1024


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from None


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once from the environment (and .env via python-dotenv)."""

    secret_key: str
    env: str
    database_url: str
    log_level: str

    storage_backend: str
    storage_root: str
    s3_endpoint: str
    s3_region: str
    s3_bucket: str
    s3_access_key_id: str
    s3_secret_access_key: str

    logo_max_bytes: int

    @property
    def is_production(self) -> bool:
        return self.env in ("prod", "production")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            secret_key=_getenv("SECRET_KEY", "change-me"),
            env=_getenv("ENV", "development").lower(),
            database_url=_getenv("DATABASE_URL", "sqlite:///cad.db"),
            log_level=_getenv("LOG_LEVEL", "INFO").upper(),
            storage_backend=_getenv("STORAGE_BACKEND", "local").lower(),
            storage_root=_getenv("STORAGE_ROOT"),
            s3_endpoint=_getenv("S3_ENDPOINT"),
            s3_region=_getenv("S3_REGION", "nyc3"),
            s3_bucket=_getenv("S3_BUCKET"),
            s3_access_key_id=_getenv("S3_ACCESS_KEY_ID"),
            s3_secret_access_key=_getenv("S3_SECRET_ACCESS_KEY"),
            logo_max_bytes=_getenv_int("LOGO_MAX_BYTES", DEFAULT_LOGO_MAX_BYTES),
        )

    def as_flask_config(self) -> dict[str, Any]:
        return {
            "SECRET_KEY": self.secret_key,
            "ENV": self.env,
            "DATABASE_URL": self.database_url,
            "LOG_LEVEL": self.log_level,
            "STORAGE_BACKEND": self.storage_backend,
            "STORAGE_ROOT": self.storage_root,
            "S3_ENDPOINT": self.s3_endpoint,
            "S3_REGION": self.s3_region,
            "S3_BUCKET": self.s3_bucket,
            "S3_ACCESS_KEY_ID": self.s3_access_key_id,
            "S3_SECRET_ACCESS_KEY": self.s3_secret_access_key,
            "LOGO_MAX_BYTES": self.logo_max_bytes,
            "SESSION_COOKIE_HTTPONLY": True,
            "SESSION_COOKIE_SAMESITE": "Lax",
            "SESSION_COOKIE_SECURE": self.is_production,
            # whole request body; logos have their own, smaller cap
            "MAX_CONTENT_LENGTH": MAX_REQUEST_BYTES,
        }


def load_config() -> dict[str, Any]:
    return Settings.from_env().as_flask_config()
