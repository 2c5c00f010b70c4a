import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEV_TOKEN_SECRET = "dev-token-secret-change-me"


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["http://localhost:5173"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "product_catalog"
    token_secret: str = DEV_TOKEN_SECRET
    host: str = "0.0.0.0"
    port: int = 5000
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    app_env: str = "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build settings from the process environment (and a .env file if present)."""
    load_dotenv(env_file)

    app_env = os.getenv("APP_ENV", "development").lower()
    secret = os.getenv("TOKEN_SECRET")
    if not secret:
        if app_env == "production":
            raise RuntimeError("TOKEN_SECRET must be set in production")
        logger.warning("TOKEN_SECRET not set, using the development secret")
        secret = DEV_TOKEN_SECRET

    return Settings(
        database_url=os.getenv("DATABASE_URL", "mongodb://localhost:27017"),
        database_name=os.getenv("DATABASE_NAME", "product_catalog"),
        token_secret=secret,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 5000)),
        allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS")),
        app_env=app_env,
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
