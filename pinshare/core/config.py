
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    LOGIN_PIN: str = os.getenv("LOGIN_PIN", "")
    SESSION_SECRET_KEY: str = os.getenv("SESSION_SECRET_KEY", "")
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60)))
    COOKIE_SECURE: bool = _env_bool("COOKIE_SECURE", "true")

    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "./uploads")
    METADATA_FILE: str = os.getenv("METADATA_FILE", "./filedata.json")
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024 * 1024)))

    # login attempts allowed per client address within the window
    LOGIN_RATE_LIMIT: int = int(os.getenv("LOGIN_RATE_LIMIT", "5"))
    LOGIN_RATE_WINDOW_SECONDS: float = float(os.getenv("LOGIN_RATE_WINDOW_SECONDS", "60"))

    STATIC_DIR: str = os.getenv("STATIC_DIR", "./public")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3002"))

    def validate(self) -> None:
        missing = [name for name in ("LOGIN_PIN", "SESSION_SECRET_KEY") if not getattr(self, name)]
        if missing:
            raise RuntimeError(f"Missing required settings: {', '.join(missing)}")

settings = Settings()
