# app/core/config.py
"""
Application configuration - loads from environment variables.
Single source of truth for all settings.
"""
import os
from typing import Optional
from urllib.parse import quote_plus
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables FIRST
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_path = BASE_DIR / '.env'
load_dotenv(dotenv_path=env_path)

# ────────────────────────────────────────────
# Application
# ────────────────────────────────────────────
APP_NAME: str = os.getenv("APP_NAME", "qrforge")
APP_URL: str = os.getenv("APP_URL", "http://localhost:8000").rstrip("/")
# Base used when building the short URL a dynamic QR code points at
PUBLIC_BASE_URL: str = (os.getenv("PUBLIC_BASE_URL") or APP_URL).rstrip("/")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILES: bool = os.getenv("LOG_TO_FILES", "true").lower() not in ("0", "false", "no")

# ────────────────────────────────────────────
# Database Configuration
# ────────────────────────────────────────────
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "qrforge_db")
DATABASE_URL = os.getenv("DATABASE_URL")

# Build DATABASE_URL
if not DATABASE_URL:
    encoded_password = quote_plus(DB_PASSWORD)
    DATABASE_URL = f"postgresql://{DB_USER}:{encoded_password}@{DB_HOST}:{DB_PORT}/{DB_NAME}"

# ────────────────────────────────────────────
# JWT Configuration
# ────────────────────────────────────────────
JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
# Accept X-User-Id header instead of a token (local development only)
ALLOW_DEV_AUTH: bool = os.getenv("ALLOW_DEV_AUTH", "false").lower() in ("1", "true", "yes")

if not JWT_SECRET_KEY:
    import warnings
    warnings.warn("JWT_SECRET_KEY not set!")

# ────────────────────────────────────────────
# Encryption at rest
# ────────────────────────────────────────────
ENCRYPTION_KEY: str = os.getenv("ENCRYPTION_KEY", "")  # 32 bytes as 64 hex chars

# ────────────────────────────────────────────
# Polar (payments)
# ────────────────────────────────────────────
POLAR_ACCESS_TOKEN: str = os.getenv("POLAR_ACCESS_TOKEN", "")
POLAR_PRODUCT_ID: str = os.getenv("POLAR_PRODUCT_ID", "")
POLAR_WEBHOOK_SECRET: str = os.getenv("POLAR_WEBHOOK_SECRET", "")
POLAR_SERVER: str = os.getenv("POLAR_SERVER", "sandbox")
POLAR_API_URL: Optional[str] = os.getenv("POLAR_API_URL")

if not POLAR_API_URL:
    POLAR_API_URL = (
        "https://api.polar.sh/v1"
        if POLAR_SERVER == "production"
        else "https://sandbox-api.polar.sh/v1"
    )

POLAR_TIMEOUT: float = float(os.getenv("POLAR_TIMEOUT", "10"))


# ────────────────────────────────────────────
# Settings Class
# ────────────────────────────────────────────
class Settings:
    APP_NAME: str = APP_NAME
    APP_URL: str = APP_URL
    PUBLIC_BASE_URL: str = PUBLIC_BASE_URL
    DATABASE_URL: str = DATABASE_URL
    JWT_SECRET_KEY: str = JWT_SECRET_KEY
    JWT_ALGORITHM: str = JWT_ALGORITHM
    ALLOW_DEV_AUTH: bool = ALLOW_DEV_AUTH
    ENCRYPTION_KEY: str = ENCRYPTION_KEY
    POLAR_ACCESS_TOKEN: str = POLAR_ACCESS_TOKEN
    POLAR_PRODUCT_ID: str = POLAR_PRODUCT_ID
    POLAR_WEBHOOK_SECRET: str = POLAR_WEBHOOK_SECRET
    POLAR_API_URL: str = POLAR_API_URL
    POLAR_TIMEOUT: float = POLAR_TIMEOUT
    LOG_LEVEL: str = LOG_LEVEL
    LOG_TO_FILES: bool = LOG_TO_FILES

settings = Settings()
