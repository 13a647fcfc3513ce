from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"

    # Data paths
    data_dir: str = "sample_data"

    # Order listing
    page_size: int = 10
    # "non_empty": keep paging until a batch comes back empty.
    # "full_page": stop as soon as a batch is shorter than page_size.
    has_more_policy: Literal["non_empty", "full_page"] = "non_empty"

    # Invoice lookup
    strict_invoice_lookup: bool = False

    # Seed data settings
    default_seed_orders: int = 200
    default_seed_days: int = 45
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
