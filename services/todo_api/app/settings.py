from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MONGO_SCHEMES = ("mongodb://", "mongodb+srv://")


class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGO_URI: str                     # required, no default
    MONGO_DB: str = "todo"             # used when the URI names no database
    MONGO_COLLECTION: str = "tasks"
    MONGO_TIMEOUT_MS: int = 5000

    # Access control
    API_TOKEN: Optional[str] = None    # unset -> auth gate disabled
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("MONGO_URI")
    @classmethod
    def _check_scheme(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(MONGO_SCHEMES):
            raise ValueError("MONGO_URI must start with mongodb:// or mongodb+srv://")
        return v

    @property
    def allowed_origins_list(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def auth_enabled(self) -> bool:
        return bool(self.API_TOKEN)


@lru_cache
def get_settings() -> Settings:
    """Single cached Settings instance, resolved from env / .env."""
    return Settings()
