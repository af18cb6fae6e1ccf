"""Settings for the dining app, read from the environment or ``.env``."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Every field can be overridden by an environment variable of the same name."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Dining Companions"
    debug: bool = False
    secret_key: str = "change-me-in-production"  # Signs the session cookie

    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated, or "*"

    database_url: str = "sqlite:///./dining_companions.db"

    # Dining requests
    display_timezone: str = "UTC"  # Used to read form date/times and render them
    browse_upcoming_only: bool = True
    min_lead_minutes: int = 60  # Hint only, rendered as the form's min attribute
    max_participants_limit: int = 20
    default_max_participants: int = 4

    # Close-out job
    scheduler_enabled: bool = True
    close_interval_minutes: int = 15

    @property
    def cors_origins(self) -> list[str]:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()
