def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from executask.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./executask.db")
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_has_conservative_pooling(monkeypatch):
    from executask.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "7")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "3")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "15")

    kwargs = db.get_engine_kwargs("postgresql+psycopg2://u:p@localhost:5432/db")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 7
    assert kwargs["max_overflow"] == 3
    assert kwargs["pool_timeout"] == 15


def test_sqlite_url_detection():
    from executask.database import database as db

    assert db._is_sqlite_url("sqlite:///./executask.db") is True
    assert db._is_sqlite_url("postgresql+psycopg2://u:p@localhost/db") is False


def test_sqlite_connections_enforce_foreign_keys(engine):
    with engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1


def test_init_db_creates_schema_for_sqlite(tmp_path, monkeypatch):
    from sqlalchemy import inspect
    from executask.database import database as db

    monkeypatch.setenv("RUN_MIGRATIONS", "true")
    url = f"sqlite:///{tmp_path / 'init.db'}"
    engine = db.build_engine(url)
    try:
        # Migrations are a PostgreSQL concern; SQLite always uses create_all.
        db.init_db(engine, url)
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()

    assert {"users", "categories", "todos", "todo_comments", "todo_attachments"} <= tables
