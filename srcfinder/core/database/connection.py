# File: srcfinder/core/database/connection.py

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def sqlite_url(db_path: Path) -> str:
    return f"sqlite:///{Path(db_path).resolve()}"


def create_cache_engine(db_path: Path) -> Engine:
    """
    Engine bound to one cache file.
    The location is chosen per session, so there is no module-level engine.
    """
    # check_same_thread=False: the session may be opened on a different thread
    # than the one that created the engine.
    return create_engine(
        sqlite_url(db_path),
        echo=False,
        connect_args={"check_same_thread": False},
    )


def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
