"""
Application settings, loaded once at startup and injected into components
"""
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Request
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ---------------------------
    # Project / Logging
    # ---------------------------
    PROJECT_NAME: str = "BT2 Horizon Travel"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ---------------------------
    # Database
    # ---------------------------
    DATABASE_URL: str = "sqlite:///./horizon.db"

    # ---------------------------
    # Security / Auth
    # ---------------------------
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    # Empty disables the x-admin-key fallback
    ADMIN_KEY: str = ""
    ADMIN_KEY_EXPIRES_AT: Optional[datetime] = None

    # ---------------------------
    # Frontend
    # ---------------------------
    FRONTEND_URL: str = "http://localhost:5173"

    # ---------------------------
    # Email (fastapi-mail)
    # ---------------------------
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "noreply@bt2horizon.com"
    MAIL_FROM_NAME: str = "BT2 Horizon"
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    MAIL_TIMEOUT: int = 10
    MAIL_SUPPRESS_SEND: bool = False
    NOTIFICATION_EMAIL: str = ""

    # ---------------------------
    # Telegram admin alerts
    # ---------------------------
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_ADMIN_CHAT_IDS: str = ""

    # ---------------------------
    # Object storage (Azure Blob)
    # ---------------------------
    AZURE_STORAGE_CONNECTION_STRING: str = ""
    STORAGE_DEFAULT_BUCKET: str = "images"
    STORAGE_DEFAULT_FOLDER: str = "packages"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024

    @field_validator("MAIL_PASSWORD")
    @classmethod
    def strip_app_password(cls, v: str) -> str:
        # Gmail app passwords are shown with spaces
        return "".join(v.split())

    @property
    def mail_configured(self) -> bool:
        return bool(self.MAIL_USERNAME and self.MAIL_PASSWORD) or self.MAIL_SUPPRESS_SEND

    @property
    def notification_recipient(self) -> str:
        return self.NOTIFICATION_EMAIL or self.MAIL_USERNAME or self.MAIL_FROM

    @property
    def admin_chat_ids(self) -> List[int]:
        """Chat ids from a comma separated list"""
        return [int(x.strip()) for x in self.TELEGRAM_ADMIN_CHAT_IDS.split(",") if x.strip()]

    def admin_key_active(self, now: Optional[datetime] = None) -> bool:
        if not self.ADMIN_KEY:
            return False
        if self.ADMIN_KEY_EXPIRES_AT is None:
            return True
        expires = self.ADMIN_KEY_EXPIRES_AT
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        return now < expires


def get_settings(request: Request) -> Settings:
    """Settings the running app was built with"""
    return request.app.state.settings
