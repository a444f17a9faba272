"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Studio Operations"
    debug: bool = False
    timezone: str = "Australia/Sydney"

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./studio_ops.db"

    # Calendar
    calendar_event_default_background_color: str = "#3a87ad"
    search_suggestion_limit: int = 10
    eod_admin_days_limit: int = 30
    in_room_auction_product_id: int = 0
    order_datetime_email_url: str = "/orders/{order_id}/datetime-email"

    # Email
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_from_address: str = "Studio Operations <noreply@example.com>"
    email_group_general_error: str = "errors@example.com"
    email_address_invoice_notifications: str = "invoices@example.com"

    # Shooter introduction notifier (weekdays only)
    shooter_introduction_hour: int = 15
    shooter_introduction_minute: int = 0

    # Xero
    xero_client_id: str = ""
    xero_client_secret: str = ""
    xero_tenant_id: str = ""
    xero_token_url: str = "https://identity.xero.com/connect/token"
    xero_api_url: str = "https://api.xero.com/api.xro/2.0"
    xero_timeout_seconds: int = 1800
    invoice_file_directory: str = "./invoices"


settings = Settings()
