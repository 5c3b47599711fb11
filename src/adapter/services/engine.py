"""Engine options shared by the API and the workers"""

from sqlalchemy import event


def build_connect_args(db_uri: str, lock_timeout_ms: int) -> dict:
    """
    Driver options bounding how long a transaction waits for a row lock

    PostgreSQL gets lock_timeout (fails with lock_not_available), SQLite
    gets the busy timeout (fails with "database is locked").
    """
    if db_uri.startswith("postgresql+asyncpg"):
        return {"server_settings": {"lock_timeout": str(lock_timeout_ms)}}
    if db_uri.startswith("sqlite"):
        return {"timeout": lock_timeout_ms / 1000}
    return {}


def apply_sqlite_locking(engine) -> None:
    """
    Make every SQLite transaction take the write lock on BEGIN

    SQLite ignores SELECT ... FOR UPDATE. BEGIN IMMEDIATE serializes
    writers instead, so a locked read-modify-write cannot interleave
    with another one. No-op for other dialects.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
