import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./audiology.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)

# Base URL the client layer prefixes to every endpoint, e.g. https://clinic.example.com
BACKEND_URL = os.getenv("BACKEND_URL", "")

CORS_ORIGINS = _get_list(
    os.getenv("CORS_ORIGINS"),
    default=["http://localhost:8081", "http://localhost:19006"],
)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

AUTH_ENTRY_PATH = os.getenv("AUTH_ENTRY_PATH", "/auth")

DEFAULT_APPOINTMENT_DURATION_MINUTES = 60


def is_backend_configured() -> bool:
    return bool(BACKEND_URL)


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
