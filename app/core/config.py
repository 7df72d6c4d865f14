from pydantic_settings import BaseSettings
from typing import List
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = os.getenv("APP_NAME", "SalonBooking")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # MongoDB Settings
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "salon_booking_db")

    # JWT Auth
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your_secret_key_here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    ACCESS_TOKEN_COOKIE: str = os.getenv("ACCESS_TOKEN_COOKIE", "access_token")

    # Auth gate: refresh attempts when a session is authenticated but has no user yet
    AUTH_REFRESH_MAX_RETRIES: int = int(os.getenv("AUTH_REFRESH_MAX_RETRIES", "3"))
    AUTH_REFRESH_BACKOFF_MS: int = int(os.getenv("AUTH_REFRESH_BACKOFF_MS", "300"))

    # Closed dates. When false, stylist closures are only stored encoded in `reason`
    CLOSED_DATES_NATIVE_STYLIST_COLUMN: bool = os.getenv(
        "CLOSED_DATES_NATIVE_STYLIST_COLUMN", "true"
    ).lower() in ("1", "true", "yes")

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",  # Vite frontend
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
