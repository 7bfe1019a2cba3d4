# finance_api/config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./finance.db"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Read settings from the process environment (and a .env file if present).
    Connection credentials live only in DATABASE_URL, never in source.
    """
    load_dotenv()

    port = os.getenv("PORT", "8000")
    try:
        port_value = int(port)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {port!r}")

    return Settings(
        database_url=os.getenv("DATABASE_URL", Settings.database_url),
        host=os.getenv("HOST", Settings.host),
        port=port_value,
        log_level=os.getenv("LOG_LEVEL", Settings.log_level).upper(),
    )
