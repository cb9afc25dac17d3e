import os


def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from inboxparser.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./inboxparser.db")
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_reads_pool_settings(monkeypatch):
    from inboxparser.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "8")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "2")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "15")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/db")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 8
    assert kwargs["max_overflow"] == 2
    assert kwargs["pool_timeout"] == 15


def test_echo_follows_debug(monkeypatch):
    from inboxparser.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite://")["echo"] is True
    monkeypatch.setenv("DEBUG", "false")
    assert db.get_engine_kwargs("sqlite://")["echo"] is False


def test_sqlite_pragmas_listener_is_guarded():
    # Verify the helper used by the connect event guard behaves as expected.
    from inboxparser.database import database as db

    assert db._is_sqlite_url("sqlite:///./inboxparser.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False
    assert db._is_sqlite_url(None) is False


def test_init_db_creates_tables(tmp_path):
    from sqlalchemy import inspect
    from inboxparser.database import database as db

    engine = db.build_engine(f"sqlite:///{tmp_path / 'capture.db'}")
    try:
        from inboxparser.database import models  # noqa: F401

        db.Base.metadata.create_all(bind=engine)
        assert {"goals", "tasks"} <= set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
