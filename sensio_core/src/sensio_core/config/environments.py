from enum import Enum
from typing import List

from pydantic_settings import BaseSettings


class Environment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TESTING = "testing"


class DataSource(str, Enum):
    SENSIO = "sensio"
    SUPABASE = "supabase"


class AccessBackend(str, Enum):
    ALLOWLIST = "allowlist"
    SUPABASE = "supabase"
    DATABASE = "database"


class Settings(BaseSettings):
    """Configuration settings for the sensio-air tool server."""

    # Environment
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Vendor API
    SENSIO_API_URL: str = "https://mlv3.sensioair.com/api/indoor_data/"
    SENSIO_API_KEY: str = ""
    SENSIO_USER_ID: str = "default"
    HTTP_TIMEOUT_SEC: float = 30.0

    # Backends
    DATA_SOURCE: DataSource = DataSource.SENSIO
    ACCESS_BACKEND: AccessBackend = AccessBackend.ALLOWLIST
    ALLOWED_DEVICE_SERIALS: str = ""

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""

    # Database (device ownership)
    DATABASE_URL: str = "sqlite:///sensio.db"

    # Cache / query limits
    CACHE_TTL_LATEST: float = 15
    CACHE_TTL_HISTORY: float = 300
    MAX_TIME_WINDOW_DAYS: int = 30
    DEFAULT_TOP_K: int = 5
    DEFAULT_RESOLUTION: str = "15m"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def allowed_device_serials(self) -> List[str]:
        return [s.strip() for s in self.ALLOWED_DEVICE_SERIALS.split(",") if s.strip()]

    def missing_required(self) -> List[str]:
        """Names of environment variables the selected backends need but are unset."""
        required = []
        if self.DATA_SOURCE == DataSource.SENSIO:
            required.append(("SENSIO_API_KEY", self.SENSIO_API_KEY))
        if self.DATA_SOURCE == DataSource.SUPABASE or self.ACCESS_BACKEND == AccessBackend.SUPABASE:
            required.append(("SUPABASE_URL", self.SUPABASE_URL))
        if self.ACCESS_BACKEND == AccessBackend.SUPABASE:
            required.append(("SUPABASE_SERVICE_KEY", self.SUPABASE_SERVICE_KEY))
        return [key for key, value in required if not value]

    def validate_for_startup(self) -> None:
        missing = self.missing_required()
        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")


def get_settings() -> Settings:
    """Get settings based on environment."""
    import os

    env = os.getenv("SENSIO_ENV", "development").lower()

    if env == "production":
        return Settings(ENVIRONMENT=Environment.PRODUCTION, LOG_LEVEL="WARNING")
    elif env == "testing":
        return Settings(
            ENVIRONMENT=Environment.TESTING,
            SENSIO_API_KEY="test-key",
            DATABASE_URL="sqlite:///:memory:",
            ALLOWED_DEVICE_SERIALS="SA1,SA2,SA3",
            API_PORT=8001,
            LOG_LEVEL="DEBUG",
        )
    else:
        return Settings(ENVIRONMENT=Environment.DEVELOPMENT, LOG_LEVEL="DEBUG")
