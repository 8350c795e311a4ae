import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy_utils import database_exists

from srcfinder.core.database.base import Base
from srcfinder.core.database.connection import create_cache_engine, session_factory, sqlite_url
from srcfinder.core.errors import CacheIOError
from .sql_models import CacheMetaModel, DirectoryModel
from ..domain.interfaces import ICacheStore
from ..domain.models import CACHE_VERSION, CacheDatabase, DirectoryEntry, StatSignal

logger = logging.getLogger(__name__)

class SqliteCacheStore(ICacheStore):
    def load(self, location: Path) -> CacheDatabase:
        location = Path(location)
        if not location.exists():
            logger.info(f"No finder cache at {location}, starting empty.")
            return CacheDatabase()

        try:
            database = self._read(location)
        except CacheIOError:
            raise
        except (SQLAlchemyError, OSError, ValueError, TypeError) as e:
            raise CacheIOError(f"Could not load finder cache {location}: {e}") from e

        logger.info(f"Loaded {len(database)} directories from finder cache {location}")
        return database

    def _read(self, location: Path) -> CacheDatabase:
        # database_exists checks the SQLite header, so arbitrary files are rejected
        # before SQLAlchemy gets a chance to treat them as an empty database.
        if not database_exists(sqlite_url(location)):
            raise CacheIOError(f"Could not load finder cache {location}: not a SQLite database")

        engine = create_cache_engine(location)
        try:
            with session_factory(engine)() as db:
                meta = db.query(CacheMetaModel).first()
                if meta is None:
                    raise CacheIOError(f"Could not load finder cache {location}: metadata row missing")
                if meta.version != CACHE_VERSION:
                    raise CacheIOError(
                        f"Could not load finder cache {location}: "
                        f"format version {meta.version}, expected {CACHE_VERSION}"
                    )
                fingerprint = meta.fingerprint

                entries = {}
                for row in db.query(DirectoryModel).all():
                    path = os.fsdecode(row.path)
                    entries[path] = DirectoryEntry(
                        path=path,
                        dir_names=tuple(row.dir_names),
                        file_names=tuple(row.file_names),
                        signal=StatSignal(mtime_ns=row.mtime_ns, inode=row.inode),
                    )
        finally:
            engine.dispose()

        return CacheDatabase(fingerprint=fingerprint, entries=entries)

    def save(self, database: CacheDatabase, location: Path) -> None:
        """
        Writes the whole database into a sibling temp file, then renames it
        over the target. Readers only ever see the old or the new snapshot.
        """
        location = Path(location)
        tmp_path = location.with_name(location.name + ".tmp")

        try:
            location.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.unlink(missing_ok=True)

            engine = create_cache_engine(tmp_path)
            try:
                Base.metadata.create_all(bind=engine)
                with session_factory(engine)() as db:
                    db.add(CacheMetaModel(version=CACHE_VERSION, fingerprint=database.fingerprint))
                    rows = [
                        {
                            "path": os.fsencode(entry.path),
                            "mtime_ns": entry.signal.mtime_ns,
                            "inode": entry.signal.inode,
                            "dir_names": list(entry.dir_names),
                            "file_names": list(entry.file_names),
                        }
                        for _, entry in sorted(database.entries.items())
                    ]
                    if rows:
                        db.execute(insert(DirectoryModel), rows)
                    db.commit()
            finally:
                engine.dispose()

            os.replace(tmp_path, location)
        except (SQLAlchemyError, OSError, UnicodeError) as e:
            self._discard(tmp_path)
            raise CacheIOError(f"Could not save finder cache {location}: {e}") from e
        except BaseException:
            self._discard(tmp_path)
            raise

        logger.info(f"Saved {len(database)} directories to finder cache {location}")

    @staticmethod
    def _discard(tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            logger.debug(f"Could not remove temporary cache {tmp_path}")

    def is_stale(self, entry: Optional[DirectoryEntry], live: StatSignal) -> bool:
        if entry is None:
            return True
        return entry.signal != live
