from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .settings import Settings, load_settings


def engine_options(settings: Settings) -> dict:
    options = {"pool_pre_ping": True, "echo": settings.sql_echo}
    # SQLite: los endpoints sync de FastAPI corren en varios hilos
    if settings.database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    return options


settings = load_settings()
engine = create_engine(settings.database_url, **engine_options(settings))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
