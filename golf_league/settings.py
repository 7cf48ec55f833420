import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Settings:
    database_url: str
    admin_key: str
    log_level: str
    sql_echo: bool = False


def _normalize_database_url(value: Optional[str]) -> str:
    if not value:
        return "sqlite:///golf_league.db"
    normalized = value.strip()
    if "://" in normalized:
        return normalized
    if Path(normalized).suffix:  # ruta directa a fichero sqlite
        return f"sqlite:///{normalized}"
    return normalized


def load_settings() -> Settings:
    return Settings(
        database_url=_normalize_database_url(os.getenv("DATABASE_URL")),
        admin_key=os.getenv("ADMIN_KEY", ""),  # vacio = modo dev, sin proteccion
        log_level=os.getenv("LOG_LEVEL", "info"),
        sql_echo=os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes"),
    )
