from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from .env
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="giftdesk", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))
    CORS_ORIGINS: list[str] = Field(default=["*"], validation_alias=AliasChoices("CORS_ORIGINS", "cors_origins"))

    # Airtable
    AIRTABLE_API_URL: str = Field(
        default="https://api.airtable.com/v0",
        validation_alias=AliasChoices("AIRTABLE_API_URL", "airtable_api_url"),
    )
    AIRTABLE_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        validation_alias=AliasChoices("AIRTABLE_TIMEOUT_SECONDS", "airtable_timeout_seconds"),
    )

    # Catalog base (Gift Hamper table); accept both token names
    AIRTABLE_BASE_ID: str = Field(default="", validation_alias=AliasChoices("AIRTABLE_BASE_ID", "airtable_base_id"))
    AIRTABLE_TOKEN: str = Field(
        default="",
        validation_alias=AliasChoices("AIRTABLE_TOKEN", "AIRTABLE_API_KEY", "airtable_token"),
    )

    # Sale base (Sale / Sale_LI tables)
    AIRTABLE_SALE_BASE_ID: str = Field(
        default="",
        validation_alias=AliasChoices("AIRTABLE_SALE_BASE_ID", "airtable_sale_base_id"),
    )
    AIRTABLE_SALE_TOKEN: str = Field(
        default="",
        validation_alias=AliasChoices("AIRTABLE_SALE_TOKEN", "AIRTABLE_SALE_API_KEY", "airtable_sale_token"),
    )

    # Invoice generator
    INVOICE_ADMIN_PASSWORD: str = Field(
        default="",
        validation_alias=AliasChoices("INVOICE_ADMIN_PASSWORD", "invoice_admin_password"),
    )
    DEFAULT_GST_PERCENT: float = Field(
        default=18.0,
        validation_alias=AliasChoices("DEFAULT_GST_PERCENT", "default_gst_percent"),
    )
    EDIT_HISTORY_LIMIT: int = Field(
        default=20,
        ge=1,
        validation_alias=AliasChoices("EDIT_HISTORY_LIMIT", "edit_history_limit"),
    )

    # Idle invoice sessions are dropped after this many seconds (30 min)
    SESSION_IDLE_SECONDS: int = Field(
        default=30 * 60,
        ge=1,
        validation_alias=AliasChoices("SESSION_IDLE_SECONDS", "session_idle_seconds"),
    )

    @property
    def sale_token(self) -> str:
        """Sale-base token, falling back to the catalog token."""
        return self.AIRTABLE_SALE_TOKEN or self.AIRTABLE_TOKEN


settings = Settings()
