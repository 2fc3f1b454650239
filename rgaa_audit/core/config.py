
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "RGAA Audit API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (PostgreSQL via asyncpg in production or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./rgaa_audit_dev.db",
        alias="DATABASE_URL",
    )

    # Example images (criterion result attachments)
    storage_dir: str = Field(default="./uploads", alias="STORAGE_DIR")
    storage_url: str = Field(default="/uploads", alias="STORAGE_URL")
    max_image_size_bytes: int = Field(
        default=2_000_000, alias="MAX_IMAGE_SIZE_BYTES",
    )

    # Notifications sent when an audit is created
    notifications_enabled: bool = Field(default=True, alias="NOTIFICATIONS_ENABLED")
    mail_from: str = Field(default="noreply@rgaa-audit.local", alias="MAIL_FROM")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def max_image_size_kb(self) -> int:
        return self.max_image_size_bytes // 1000

settings = Settings()
