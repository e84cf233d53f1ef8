
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Hewpao API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"
    max_upload_size_mb: int = 10

    # Database (PostgreSQL in production or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./hewpao_dev.db",
        alias="DATABASE_URL",
    )

    # Object storage (MinIO / S3)
    s3_endpoint: str = Field(default="localhost:9000", alias="S3_ENDPOINT")
    s3_access_key: str | None = Field(default=None, alias="S3_ACCESS_KEY")
    s3_secret_key: str | None = Field(default=None, alias="S3_SECRET_KEY")
    s3_secure: bool = Field(default=False, alias="S3_SECURE")
    s3_region: str | None = Field(default=None, alias="S3_REGION")
    s3_bucket_name: str = Field(default="hewpao-s3", alias="S3_BUCKET_NAME")
    s3_expiration: str = Field(
        default="15m", alias="S3_EXPIRATION",
    )  # Go-style duration, e.g. "15m", "1h30m"

    # Notifications
    notification_webhook_url: str | None = Field(
        default=None, alias="NOTIFICATION_WEBHOOK_URL",
    )
    notification_timeout: float = Field(default=10.0, alias="NOTIFICATION_TIMEOUT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def notifications_enabled(self) -> bool:
        """Webhook notifications are sent only when a target URL is configured."""
        return bool(self.notification_webhook_url)

settings = Settings()
