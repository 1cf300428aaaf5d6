"""
Database session management - SQLAlchemy engine and session factory.

Only used when SESSION_STORE or MEMBER_STORE is "database"; the default
in-memory deployment never opens a connection. The schema itself is
managed by Alembic (alembic/versions), applied with `alembic upgrade head`.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def create_db_engine(database_url: str) -> Engine:
    """
    Build an engine for DATABASE_URL.

    - pool_pre_ping=True: check pooled connections before use, so a
      database restart does not surface as a failed request.
    - SQLite needs check_same_thread=False because store calls run in
      the threadpool, not on the thread that opened the connection.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Session factory bound to engine.

    Call SessionLocal() to get a session; autocommit/autoflush are off so
    every write is an explicit commit().
    """
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

