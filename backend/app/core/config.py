from decimal import Decimal
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application configuration."""

    APP_NAME: str = "Vannamiyal Thangamaligai"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = Field(default="development", validation_alias="ENV", description="Deployment environment")

    # Database
    DATABASE_PATH: str = Field(default="./database/gold_billing.db")
    DATABASE_URL: Optional[str] = Field(default=None, description="Overrides DATABASE_PATH when set")
    AUTO_CREATE_SCHEMA: bool = True

    # HTTP
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    CORS_ORIGIN: str = "http://localhost:5173"

    # Billing rules
    ENFORCE_STOCK_CHECK: bool = True
    TOTALS_POLICY: Literal["trust", "warn", "enforce"] = "warn"
    TOTALS_TOLERANCE: Decimal = Decimal("0.01")
    NUMBER_RETRIES: int = Field(default=5, ge=1)
    DEFAULT_TAX_PERCENTAGE: Decimal = Decimal("3")

    # Observability
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"sqlite:///{Path(self.DATABASE_PATH).expanduser()}"


settings = Settings()
