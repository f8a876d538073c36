"""
Configuration management for Pedido Bot.
Loads settings from environment variables with validation.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    base_dir: Path = Path(__file__).parent.parent.parent
    data_dir: Path = Path(__file__).parent.parent.parent / "data"

    # Telegram
    telegram_bot_token: Optional[str] = Field(
        default=None, description="Telegram Bot API token"
    )

    # LLM Provider
    llm_provider: Literal["gigachat"] = Field(
        default="gigachat", description="LLM provider to use"
    )

    # GigaChat
    gigachat_credentials: Optional[str] = Field(
        default=None, description="GigaChat API credentials"
    )
    gigachat_scope: str = Field(
        default="GIGACHAT_API_PERS", description="GigaChat API scope"
    )
    gigachat_model: str = Field(
        default="GigaChat", description="GigaChat model used by the oracle"
    )
    gigachat_verify_ssl: bool = Field(
        default=False, description="Verify GigaChat TLS certificates"
    )

    # Oracle
    oracle_enabled: bool = Field(
        default=False, description="Consult the LLM for segmentation and gap filling"
    )
    oracle_timeout_seconds: float = Field(
        default=15.0, gt=0, description="Hard timeout for every oracle call"
    )
    segmentation_strategy: Literal["delimiter", "oracle"] = Field(
        default="delimiter", description="How multi-product messages are split"
    )

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL",
    )

    @property
    def db_url(self) -> str:
        """Get database URL with absolute path."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'pedidos.db'}"

    # Ordering rules
    max_quantity: int = Field(
        default=10000, gt=0, description="Largest quantity accepted for one line"
    )
    default_unit: str = Field(
        default="unidad", description="Unit used for products without allowed units"
    )
    default_facility_code: str = Field(
        default="1000", description="Facility code for products that declare none"
    )

    # Sessions
    session_conflict_retries: int = Field(
        default=3, ge=1, description="Attempts per turn when a concurrent write wins"
    )

    # Debug
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def catalog_dir(self) -> Path:
        """Directory for catalog spreadsheets."""
        return self.data_dir / "catalog"

    @property
    def sqlite_path(self) -> Path:
        """Path to SQLite database file."""
        return self.data_dir / "pedidos.db"


# Global settings instance
settings = Settings()
