# marketplace/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _csv_env(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = os.getenv("APP_NAME", "Marketplace API")
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for the admin/user frontend
    CORS_ORIGINS: list[str] = _csv_env(
        "CORS_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
    )

    # Pagination defaults shared by list endpoints
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "200"))

    # Bootstrap super admin (only created when no admin exists yet)
    bootstrap_admin_name: str = os.getenv("ADMIN_NAME", "Super Admin")
    bootstrap_admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    bootstrap_admin_password: str | None = os.getenv("ADMIN_PASSWORD")

settings = Settings()  # Instantiate configuration
