from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import enum
import json


class RecordWritePolicy(str, enum.Enum):
    UPSERT = "upsert"
    REJECT = "reject"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", frozen=True, extra="ignore")

    SECRET_KEY: Optional[str] = None
    DATABASE_URL: Optional[str] = None

    ALGORITHM: str = "HS256"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Sessions
    SESSION_COOKIE_NAME: str = "medform.sid"
    SESSION_TTL_HOURS: int = 24
    SESSION_TOUCH_AFTER_SECONDS: int = 24 * 3600
    SESSION_IDLE_TIMEOUT_MINUTES: Optional[int] = None

    # S3 / file storage
    S3_BUCKET: str = ""
    S3_REGION: str = ""
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_PRESCRIPTIONS_FOLDER: str = "mediband/prescriptions"
    S3_FILES_FOLDER: str = "mediband/files"

    UPLOAD_TMP_DIR: str = "public/temp"
    MAX_UPLOAD_FILES: int = 10
    UPLOAD_WORKERS: int = 4

    # Medical records
    RECORD_WRITE_POLICY: RecordWritePolicy = RecordWritePolicy.UPSERT
    ALLOW_PUBLIC_RECORD_LOOKUP: bool = True

    # JSON list or comma separated string
    ALLOWED_ORIGINS: str = ""

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def allowed_origins(self) -> List[str]:
        raw = (self.ALLOWED_ORIGINS or "").strip()
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
            if isinstance(parsed, list):
                return [str(o) for o in parsed]
        except ValueError:
            pass
        return [s.strip() for s in raw.split(',') if s.strip()]

    @property
    def cookie_samesite(self) -> str:
        return "none" if self.is_production else "lax"


def load_settings(**overrides) -> Settings:
    """Build the process-wide settings once at startup."""
    settings = Settings(**overrides)
    if not settings.SECRET_KEY or not settings.DATABASE_URL:
        raise RuntimeError("Environment variables SECRET_KEY and DATABASE_URL must be set (see .env.example)")
    return settings
