"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, with no scattered magic strings.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_enabled: Toggle slowapi enforcement (disabled in tests).
        rate_limit_default: Default rate limit for read endpoints.
        rate_limit_write: Rate limit for state-changing endpoints.
        database_url: SQLAlchemy URL of the marketplace database.
        database_echo: Log every SQL statement.
        starting_balance: Balance credited to every new identity.
        currency_symbol: Unit shown in transaction memos.
        image_base_url: Prefix joined to stored image references.
        max_images_per_item: Upper bound on images per minted item.
        bcrypt_rounds: Work factor for credential hashing.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "NexusMarket"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"
    rate_limit_write: str = "20/minute"

    database_url: str = "sqlite:///./nexusmarket.db"
    database_echo: bool = False

    starting_balance: Decimal = Decimal("100")
    currency_symbol: str = "ETH"
    image_base_url: str = "/uploads"
    max_images_per_item: int = 8
    bcrypt_rounds: int = 12


settings = Settings()
