"""Runtime configuration read from the environment (and an optional .env file)."""
import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised when a required setting is missing; fatal at startup."""


class Settings(NamedTuple):
    jwt_secret: str
    database_url: str = "sqlite:///./shop.db"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 4000


def load_settings(env_file: Optional[str] = None) -> Settings:
    # Values already present in the environment win over the .env file
    load_dotenv(env_file)

    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise ConfigError("JWT_SECRET must be set to sign access tokens")

    return Settings(
        jwt_secret=secret,
        database_url=os.getenv("DATABASE_URL", "sqlite:///./shop.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "4000")),
    )
