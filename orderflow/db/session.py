from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from orderflow.core.config import settings

class Base(DeclarativeBase): pass

def make_engine(dsn: str, lock_timeout_ms: int = settings.DB_LOCK_TIMEOUT_MS) -> Engine:
    if not dsn.startswith('sqlite'):
        return create_engine(dsn, pool_pre_ping=True, pool_size=settings.DB_POOL_SIZE)

    engine = create_engine(
        dsn,
        connect_args={'timeout': lock_timeout_ms / 1000, 'check_same_thread': False},
    )

    # SQLite has no row locks: take the database write lock when the
    # transaction begins so concurrent units of work serialize.
    @event.listens_for(engine, 'connect')
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    @event.listens_for(engine, 'begin')
    def _on_begin(conn):
        conn.exec_driver_sql('BEGIN IMMEDIATE')

    return engine

def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

engine = make_engine(settings.DATABASE_DSN)
SessionLocal = make_session_factory(engine)
