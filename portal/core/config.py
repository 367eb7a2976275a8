from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./portal.db"

    # Security / JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Logging / observability
    LOG_LEVEL: str = "INFO"
    SLOW_REQUEST_MS: float = 500.0

    # PhonePe co-pay gateway
    PHONEPE_MERCHANT_ID: Optional[str] = None
    PHONEPE_SALT_KEY: Optional[str] = None
    PHONEPE_SALT_INDEX: str = "1"
    PHONEPE_API_URL: str = "https://api-preprod.phonepe.com/apis/pg-sandbox"
    PHONEPE_REDIRECT_URL_BASE: Optional[str] = None
    PAYMENT_TIMEOUT_SECONDS: float = 15.0

    # Mail
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    MAIL_FROM: str = "no-reply@rewards.local"
    SUPPORT_EMAIL: str = "support@rewards.local"

    # Display identifiers
    ORDER_ID_PREFIX: str = "ORD"
    BULK_BUY_ID_PREFIX: str = "BBR"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
