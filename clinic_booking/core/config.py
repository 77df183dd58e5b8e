from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./clinic_booking.db"
    database_ssl: bool = False
    auto_create_tables: bool = True
    seed_demo_data: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Booking rules
    default_treatment_duration_minutes: int = 30
    # Break endpoints are matched on the hour only unless this is enabled
    break_minute_precision: bool = False

    # Env
    env: str = "development"

    # Email (SMTP). Leave smtp_host empty to disable sending.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "Clinic Booking"
    site_name: str = "Clinic Booking"
    contact_email: str = "support@clinic-booking.local"
    contact_phone: str = ""

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.from_email)

    @property
    def is_production(self) -> bool:
        return self.env == "production"


settings = Settings()
