"""Environment configuration for the Virtual Try-On backend.

Values are read once from the process environment (and a local ``.env`` file
when present) into a ``Settings`` object that is handed to ``create_app``.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API server."""

    app_name: str = "Virtual Try-On API"
    app_version: str = "1.0.0"
    environment: str = "production"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    max_upload_mb: int = 15
    docs_url: str = "/docs"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def expose_details(self) -> bool:
        """Whether error responses may include the underlying message."""
        return self.debug or self.environment == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Returns:
            Settings populated from ``APP_*``, ``PORT``, ``HOST`` and friends
        """
        load_dotenv()
        return cls(
            app_name=os.getenv("APP_NAME", "Virtual Try-On API"),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
            environment=os.getenv("APP_ENV", "production").strip().lower(),
            debug=_env_bool("DEBUG"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3001")),
            cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
            max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "15")),
            docs_url=os.getenv("DOCS_URL", "/docs"),
        )
