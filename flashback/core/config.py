from pydantic_settings import BaseSettings
from pathlib import Path
import logging
import os

from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Load .env explicitly before creating Settings so plain os.getenv lookups see it too
project_dir = Path(__file__).parent.parent.parent
env_path = project_dir / ".env"

if env_path.exists():
    load_dotenv(env_path, override=False)
    _logger.info(f"Loaded .env file from: {env_path}")
else:
    current_env = Path(".env")
    if current_env.exists():
        load_dotenv(current_env, override=False)
        _logger.info(f"Loaded .env file from: {current_env.absolute()}")


# Hours to wait before surfacing an item again, indexed by SRS stage.
# Timings follow the WaniKani schedule.
DEFAULT_SRS_INTERVALS = [0, 4, 8, 23, 47, 167, 335, 719, 2879]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Database
    database_url: str = "sqlite:///./flashback.db"
    
    # API
    api_v1_prefix: str = "/api/v1"
    
    # CORS
    cors_origins: list[str] = ["*"]
    
    # SRS stage table (hours until next review, per stage)
    srs_intervals: list[int] = DEFAULT_SRS_INTERVALS
    
    # There is no account model; every item belongs to this reviewer
    reviewer_id: str = "testUser"
    
    # Logging / runtime
    log_level: str = "INFO"
    environment: str = "production"
    
    class Config:
        env_file = ".env"
        case_sensitive = False
    
    def __init__(self, **kwargs):
        # Hosting platforms provide DATABASE_URL uppercase
        if not kwargs.get("database_url") and os.getenv("DATABASE_URL"):
            kwargs["database_url"] = os.getenv("DATABASE_URL")
        super().__init__(**kwargs)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")


# Create settings instance
settings = Settings()

if not settings.srs_intervals:
    raise ValueError("SRS_INTERVALS must contain at least one stage")
if any(hours < 0 for hours in settings.srs_intervals):
    raise ValueError("SRS_INTERVALS must only contain non-negative hour values")
