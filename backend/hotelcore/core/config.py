"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Settings read from the environment (and .env when present)"""

    def __init__(self):
        # Database
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hotel.db")
        self.SQL_ECHO = _env_bool("SQL_ECHO", False)

        # Hotel-local time
        self.DEFAULT_HOTEL_TIMEZONE = os.getenv("DEFAULT_HOTEL_TIMEZONE", "America/Chicago")

        # Guest ordering
        self.DUPLICATE_WINDOW_SECONDS = int(os.getenv("DUPLICATE_WINDOW_SECONDS", "5"))
        self.GUEST_SITE_BASE_URL = os.getenv("GUEST_SITE_BASE_URL", "http://localhost:3000")
        self.ESTIMATED_DELIVERY_MINUTES = int(os.getenv("ESTIMATED_DELIVERY_MINUTES", "25"))

        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_JSON = _env_bool("LOG_JSON", False)

        # WhatsApp notifications (Twilio)
        self.NOTIFICATIONS_ENABLED = _env_bool("NOTIFICATIONS_ENABLED", True)
        self.TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
        self.TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
        self.TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM")
        self.ORDER_CONFIRMATION_TEMPLATE = os.getenv("ORDER_CONFIRMATION_TEMPLATE")
        self.CHECK_IN_TEMPLATE = os.getenv("CHECK_IN_TEMPLATE")
        self.ORDER_READY_TEMPLATE = os.getenv("ORDER_READY_TEMPLATE")
        self.ORDER_DELIVERED_TEMPLATE = os.getenv("ORDER_DELIVERED_TEMPLATE")
        self.NOTIFY_MAX_ATTEMPTS = int(os.getenv("NOTIFY_MAX_ATTEMPTS", "3"))
        self.NOTIFY_RETRY_DELAY = float(os.getenv("NOTIFY_RETRY_DELAY", "2.0"))

        # HTTP
        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

    @property
    def twilio_configured(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_WHATSAPP_FROM)


settings = Settings()
