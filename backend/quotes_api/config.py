# quotes_api/config.py
import os
from pathlib import Path

from pydantic import BaseModel
from dotenv import load_dotenv

# Load .env from the repository root (two levels above this package)
ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = os.getenv("APP_NAME", "Rental Quote API")
    APP_VERSION: str = os.getenv("APP_VERSION", "1.0.0")
    env: str = os.getenv("ENV", "development")

    # CORS origins for the static frontend
    CORS_ORIGINS: list[str] = [
        os.getenv("FRONTEND_URL", "http://localhost:5500"),
        "http://127.0.0.1:5500",
    ]

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    max_login_attempts: int = int(os.getenv("MAX_LOGIN_ATTEMPTS", "5"))
    lockout_minutes: int = int(os.getenv("LOCKOUT_MINUTES", "120"))
    password_min_length: int = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))

    # Quotes
    quote_validity_days: int = int(os.getenv("QUOTE_VALIDITY_DAYS", "30"))
    quote_number_retries: int = int(os.getenv("QUOTE_NUMBER_RETRIES", "3"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_buffer_size: int = int(os.getenv("LOG_BUFFER_SIZE", "500"))

    # Reported by /admin/settings only
    smtp_host: str | None = os.getenv("SMTP_HOST")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    max_file_size: str = os.getenv("MAX_FILE_SIZE", "10MB")

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


settings = Settings()  # Instantiate configuration
