import os
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from cryptography.fernet import Fernet
from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"


def _generate_fernet_key() -> str:
    return Fernet.generate_key().decode()


def _ensure_env_file() -> None:
    """Ensure DATABASE_URL and ENCRYPTION_KEY are available; persist defaults to .env.

    - DATABASE_URL defaults to an absolute SQLite aiosqlite path under project root
    - ENCRYPTION_KEY is generated with Fernet if absent
    Values already present in the process environment are never written back.
    """
    load_dotenv(dotenv_path=ENV_PATH, override=False)

    missing: dict[str, str] = {}
    if not os.getenv("DATABASE_URL"):
        missing["DATABASE_URL"] = f"sqlite+aiosqlite:///{(PROJECT_ROOT / 'netwatch.db').as_posix()}"
    if not os.getenv("ENCRYPTION_KEY"):
        missing["ENCRYPTION_KEY"] = _generate_fernet_key()

    if missing:
        with ENV_PATH.open("a", encoding="utf-8") as env_file:
            for key, value in missing.items():
                env_file.write(f"{key}={value}\n")
        os.environ.update(missing)


class Settings(BaseSettings):
    DATABASE_URL: str
    ENCRYPTION_KEY: str

    # Which gateway implementation talks to the router: "routeros" or "mock"
    GATEWAY_BACKEND: str = "routeros"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    GATEWAY_USE_TLS: bool = False
    GATEWAY_VERIFY_TLS: bool = False

    # Used by the poller until a SystemConfig row with an interval exists
    DEFAULT_POLLING_INTERVAL: int = 30
    # Run the reconciliation loop inside the API process
    EMBEDDED_POLLER: bool = True

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=str(ENV_PATH), extra="ignore")


# Prepare environment and then instantiate Settings
_ensure_env_file()
settings = Settings()  # type: ignore[call-arg]


def get_now() -> datetime:
    """Returns the current UTC time as a naive datetime (the form stored in the DB)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
