from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, BigInteger, DateTime, JSON, LargeBinary
from srcfinder.core.database.base import Base

def utc_now():
    return datetime.now(timezone.utc)

class CacheMetaModel(Base):
    __tablename__ = "cache_meta"

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False)
    # SHA-1 of the traversal rules the rows below were scanned under
    fingerprint = Column(String, nullable=False)
    saved_at = Column(DateTime(timezone=True), default=utc_now)

class DirectoryModel(Base):
    __tablename__ = "directories"

    # os.fsencode(path): raw filesystem bytes, so undecodable names round-trip
    path = Column(LargeBinary, primary_key=True)
    mtime_ns = Column(BigInteger, nullable=False)
    inode = Column(BigInteger, nullable=False)
    dir_names = Column(JSON, nullable=False, default=list)
    file_names = Column(JSON, nullable=False, default=list)
