import os
import logging
import json
from pathlib import Path
from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()

# Check for secrets file (same key/value layout as the legacy env.json)
SECRETS_FILE = os.getenv("SECRETS_FILE", "")
if SECRETS_FILE and Path(SECRETS_FILE).exists():
    try:
        with open(SECRETS_FILE, "r") as f:
            secrets_data = json.load(f)
            for key, value in secrets_data.items():
                if key not in os.environ:
                    os.environ[key] = str(value)
        logger.info(f"Loaded secrets from {SECRETS_FILE}")
    except (OSError, ValueError) as e:
        logger.error(f"Error loading secrets file: {e}")


class Settings(BaseSettings):
    """Application settings.

    This class uses Pydantic's BaseSettings which loads variables from environment
    variables or .env files. It provides validation and type conversion.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # API Configuration
    PROJECT_NAME: str = "Domains API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Composition API (site ownership lookups)
    API_ENDPOINT: str = "http://localhost:3000"

    # Cloudflare Configuration
    CLOUDFLARE_ID: str = ""
    CLOUDFLARE_KEY: str = ""
    CLOUDFLARE_ENDPOINT: str = "https://api.cloudflare.com/client/v4"
    DNS_PROXY_NAME: str = "proxy.xylophonexyz.com"

    # Redis Configuration
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    # Outbound request timeout, seconds
    REQUEST_TIMEOUT: float = 30.0

    # Monitoring Configuration
    ENABLE_METRICS: bool = True

    @field_validator("CLOUDFLARE_ID", "CLOUDFLARE_KEY")
    @classmethod
    def validate_cloudflare_settings(cls, v: str) -> str:
        # In production, these settings are required
        if os.getenv("ENVIRONMENT", "").lower() == "production" and not v:
            logger.warning("Missing required Cloudflare configuration in production environment")
        return v


settings = Settings()
