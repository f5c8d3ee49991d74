# turnos/config.py

from functools import lru_cache
from typing import List, Union

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Central application settings (Pydantic v2).

    - Aliases match the .env keys:
      APP_NAME, ENV, JWT_ALG, JWT_EXPIRES_MIN
    - Loaded once per process via get_settings(); tests build their own instance.
    """

    # ------------------------------------------------------------------------------------
    # App / API
    # ------------------------------------------------------------------------------------
    PROJECT_NAME: str = Field(default="turnos-api", alias="APP_NAME")
    ENVIRONMENT: str = Field(default="dev", alias="ENV")  # dev|staging|prod
    PROJECT_VERSION: str = Field(default="1.0.0")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="", description="json | console; empty picks by ENV")

    # ------------------------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------------------------
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./dev.db",
        description="Async SQLAlchemy URL (postgresql+asyncpg or sqlite+aiosqlite)",
    )
    DATABASE_ECHO: bool = Field(default=False)
    AUTO_CREATE_SCHEMA: bool = Field(default=True, description="create_all() on startup")

    # ------------------------------------------------------------------------------------
    # JWT / Auth
    # ------------------------------------------------------------------------------------
    JWT_SECRET: str = Field(
        default="super-long-very-random-secret-change-me-now",
        description="HS256 secret (never commit real secrets)",
    )
    JWT_ALGORITHM: str = Field(default="HS256", alias="JWT_ALG")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=1440, alias="JWT_EXPIRES_MIN")

    # ------------------------------------------------------------------------------------
    # Passwords (argon2id)
    # ------------------------------------------------------------------------------------
    PASSWORD_HASH_TIME_COST: int = Field(default=3)
    PASSWORD_HASH_MEMORY_COST: int = Field(default=65536, description="KiB")
    PASSWORD_HASH_PARALLELISM: int = Field(default=4)

    # ------------------------------------------------------------------------------------
    # Scheduling rules
    # ------------------------------------------------------------------------------------
    STRICT_SLOT_EXCLUSIVITY: bool = Field(
        default=False,
        description="Reject bookings over any active pending/confirmed appointment at the same slot",
    )
    STRICT_STATE_TRANSITIONS: bool = Field(
        default=False,
        description="Only allow pendiente->confirmado->completado and cancel from open states",
    )

    # ------------------------------------------------------------------------------------
    # CORS / Web
    # ------------------------------------------------------------------------------------
    BACKEND_CORS_ORIGINS: Union[List[str], str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:8000",
        ]
    )

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    # ------------------------------------------------------------------------------------
    # Helper properties
    # ------------------------------------------------------------------------------------
    @property
    def is_dev(self) -> bool:
        return self.ENVIRONMENT.lower() in {"dev", "development", "local", "test"}

    @property
    def log_format(self) -> str:
        if self.LOG_FORMAT in ("json", "console"):
            return self.LOG_FORMAT
        return "console" if self.is_dev else "json"

    def cors_origins(self) -> List[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, list):
            return self.BACKEND_CORS_ORIGINS
        return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
