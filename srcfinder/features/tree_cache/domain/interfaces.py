from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .models import CacheDatabase, DirectoryEntry, StatSignal

class ICacheStore(ABC):
    """
    Contract for durable storage of the directory tree.
    """
    @abstractmethod
    def load(self, location: Path) -> CacheDatabase:
        """
        Reads the database at `location`.
        A missing location is an empty database, not an error.
        Raises CacheIOError if the location exists but cannot be parsed.
        """
        pass

    @abstractmethod
    def save(self, database: CacheDatabase, location: Path) -> None:
        """
        Replaces the database at `location` without ever leaving a
        half-written file behind. Raises CacheIOError on failure.
        """
        pass

    @abstractmethod
    def is_stale(self, entry: Optional[DirectoryEntry], live: StatSignal) -> bool:
        """True when there is no prior entry or its signal differs from `live`."""
        pass
