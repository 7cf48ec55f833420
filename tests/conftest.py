import os

# antes de importar la app: base de datos en memoria y admin abierto
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from golf_league import crud, main, schemas, seed
from golf_league.db import Base, engine_options, get_db
from golf_league.settings import Settings

WILLINGDON_PARS = [4, 3, 4, 4, 4, 3, 5, 3, 4, 3, 4, 3, 3, 3, 4, 3, 5, 3]


def scores_over_par(pars, over):
    """Tarjeta sin capeo: +1 en los primeros `over` hoyos (over <= 18)."""
    return [p + 1 if i < over else p for i, p in enumerate(pars)]


@pytest.fixture
def engine():
    settings = Settings(database_url="sqlite://", admin_key="", log_level="info")
    engine = create_engine(settings.database_url, poolclass=StaticPool, **engine_options(settings))
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def org(db):
    return crud.create_organization(
        db, schemas.OrganizationCreate(name="Sunday Group", slug="sunday-group")
    )


@pytest.fixture
def courses(db, org):
    # Willingdon (slope 110), BPGC y US Club (sin slope)
    created = seed.seed_organization(db, org)
    return {c.name: c for c in created}


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
