from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Pocket Kintai"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Database
    DATABASE_URL: str = "postgresql://kintai_user:kintai_pass@db:5432/kintai_db"

    # Security
    JWT_SECRET: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = 24

    # Public company identifiers (HMAC key)
    COMPANY_ID_SECRET: str = "company-id-secret"

    # Mailgun for verification emails
    MAILGUN_API_KEY: Optional[str] = None
    MAILGUN_DOMAIN: Optional[str] = None
    EMAIL_FROM: str = "noreply@example.com"
    EMAIL_FROM_NAME: str = "Pocket Kintai"

    # App URL (frontend), used in verification links and CORS
    FRONTEND_URL: str = "http://localhost:3000"

    # Notes marker used to flag a short break when no break duration was recorded
    BREAK_SHORT_MARKER: str = "休憩時間短め"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
