# backend/config/settings.py
import os
from urllib.parse import quote_plus
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SQLITE = "sqlite:///./storage_market.db"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL", "").strip()
    if url:
        return url

    db_host = os.getenv("DB_HOST", "").strip()
    db_name = os.getenv("DB_NAME", "").strip()
    db_user = os.getenv("DB_USER", "").strip()
    db_password = os.getenv("DB_PASSWORD", "").strip()
    db_port = os.getenv("DB_PORT", "1433").strip()

    if not all([db_host, db_name, db_user, db_password]):
        return DEFAULT_SQLITE

    odbc_str = (
        "DRIVER=ODBC Driver 17 for SQL Server;"
        f"SERVER={db_host},{db_port};"
        f"DATABASE={db_name};"
        f"UID={db_user};"
        f"PWD={db_password};"
        "Encrypt=yes;"
        "TrustServerCertificate=yes;"
    )
    return "mssql+pyodbc:///?odbc_connect=" + quote_plus(odbc_str)


DATABASE_URL = get_database_url()
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 5)
DB_MAX_OVERFLOW = _env_int("DB_MAX_OVERFLOW", 10)
DB_POOL_TIMEOUT = _env_int("DB_POOL_TIMEOUT", 30)
DB_STATEMENT_TIMEOUT = _env_int("DB_STATEMENT_TIMEOUT", 15)
DB_ECHO = _env_bool("DB_ECHO")

BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 12)

SESSION_SECRET = os.getenv("SESSION_SECRET", "change-me-in-production")
SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE")
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3081").split(",")
    if o.strip()
]

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_LISTING_IMAGES = _env_int("MAX_LISTING_IMAGES", 4)
MAX_IMAGE_BYTES = 10 * 1024 * 1024

CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
