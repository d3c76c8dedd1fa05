from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    DATABASE_URL: str = "postgresql+asyncpg://app_user@localhost:5432/tablebook"
    REDIS_URL: str = "redis://localhost:6379/0"

    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Bearer token for the admin console; real authentication sits in front of the API.
    ADMIN_TOKEN: str | None = None

    RESTAURANT_NAME: str = "Float 30"
    RESTAURANT_TIMEZONE: str = "America/Toronto"

    # Redis slot holds while a booking or closure is being committed
    HOLD_TTL_SECONDS: int = 30
    # held for a whole forced closure pass, SMS sends included
    CLOSURE_LOCK_TTL_SECONDS: int = 300

    # Cancellation notices go out by SMS when Twilio is configured
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM_NUMBER: str | None = None

    model_config = ConfigDict(env_file=".env", extra="ignore")


settings = Settings()
