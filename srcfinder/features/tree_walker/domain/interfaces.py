from abc import ABC, abstractmethod
from typing import Tuple

from srcfinder.features.tree_cache.domain.models import StatSignal

class IDirectoryLister(ABC):
    """
    Contract for the two filesystem probes the walker needs.
    Abstracts os.scandir so tests can count or fail individual calls.
    """
    @abstractmethod
    def stat(self, path: str) -> StatSignal:
        """
        Returns the staleness signal of the directory at `path`.
        Raises FileNotFoundError if it is gone, other OSErrors if unreadable.
        """
        pass

    @abstractmethod
    def list_dir(self, path: str) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        """
        Lists `path` and returns (subdirectory names, file names), each sorted.
        """
        pass
