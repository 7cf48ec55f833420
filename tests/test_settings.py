from golf_league import db, settings


def test_database_url_defaults_to_local_sqlite(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert settings.load_settings().database_url == "sqlite:///golf_league.db"


def test_database_url_file_path(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "data/league.db")
    assert settings.load_settings().database_url == "sqlite:///data/league.db"


def test_database_url_kept_as_is(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://golf@localhost/league")
    assert settings.load_settings().database_url == "postgresql://golf@localhost/league"


def test_sql_echo_flag(monkeypatch):
    monkeypatch.setenv("SQL_ECHO", "true")
    assert settings.load_settings().sql_echo is True
    monkeypatch.setenv("SQL_ECHO", "0")
    assert settings.load_settings().sql_echo is False


def test_engine_options_for_sqlite_and_others():
    sqlite = db.engine_options(settings.Settings("sqlite:///x.db", "", "info"))
    assert sqlite["connect_args"] == {"check_same_thread": False}
    assert sqlite["pool_pre_ping"] is True

    pg = db.engine_options(settings.Settings("postgresql://h/db", "", "info", sql_echo=True))
    assert "connect_args" not in pg
    assert pg["echo"] is True
