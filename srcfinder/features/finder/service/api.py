import logging
import os
import threading
from pathlib import Path
from typing import List, Optional

from srcfinder.core.errors import CacheIOError, FatalScanError
from srcfinder.features.tree_cache.data.repository import SqliteCacheStore
from srcfinder.features.tree_cache.domain.interfaces import ICacheStore
from srcfinder.features.tree_cache.domain.models import CacheDatabase, TraversalRules
from srcfinder.features.tree_query.service import api as queries
from srcfinder.features.tree_query.service.api import DirectoryPredicate
from srcfinder.features.tree_walker.domain.interfaces import IDirectoryLister
from srcfinder.features.tree_walker.domain.models import WalkResult, WalkSummary
from srcfinder.features.tree_walker.service.walker import IncrementalWalker

logger = logging.getLogger(__name__)

class Finder:
    """
    Facade for the Finder Feature.
    Loads the previous cache, refreshes it with an incremental walk on a
    background thread, answers queries once the walk is done, and saves the
    cache back on shutdown.
    """

    def __init__(self,
                 rules: TraversalRules,
                 cache_path: Path,
                 workers: int = 1,
                 lister: Optional[IDirectoryLister] = None,
                 store: Optional[ICacheStore] = None):
        self.rules = rules
        self.cache_path = Path(cache_path)
        self.store = store or SqliteCacheStore()
        self.walker = IncrementalWalker(rules, self.store, lister=lister, workers=workers)

        self._check_roots()

        self._lock = threading.Lock()
        self._shut_down = False
        self._result: Optional[WalkResult] = None
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run_walk, name="srcfinder-scan", daemon=True)
        self._thread.start()

    def _check_roots(self) -> None:
        if not os.path.isdir(self.rules.working_directory):
            raise FatalScanError(f"No working directory for module-finder: {self.rules.working_directory}")
        for root in self.rules.root_dirs:
            abs_root = self.rules.absolute(root)
            if not os.path.isdir(abs_root):
                raise FatalScanError(f"Could not create module-finder: root {abs_root} is not a directory")

    def _load_previous(self) -> CacheDatabase:
        try:
            return self.store.load(self.cache_path)
        except CacheIOError as e:
            # A broken cache only costs a full rescan.
            logger.warning(f"Ignoring unreadable finder cache: {e}")
            return CacheDatabase()

    def _run_walk(self) -> None:
        try:
            self._result = self.walker.walk(self._load_previous())
        except BaseException as e:
            # Re-raised on the caller's thread by wait().
            self._error = e

    def wait(self) -> WalkResult:
        """Blocks until the walk has finished and returns its result."""
        self._thread.join()
        if self._error is not None:
            raise self._error
        return self._result

    @property
    def database(self) -> CacheDatabase:
        return self.wait().database

    @property
    def summary(self) -> WalkSummary:
        return self.wait().summary

    def cancel(self) -> None:
        """
        Stops the walk early. The partial result stays queryable but is never
        written back to the cache.
        """
        self.walker.cancel()

    def find_first_named_at(self, start: str, name: str) -> List[str]:
        if self.rules.include_files and name not in self.rules.include_files:
            raise ValueError(
                f"{name!r} is not one of the finder's include files: {sorted(self.rules.include_files)}"
            )
        return queries.find_first_named_at(self.database, start, name)

    def find_matching(self, start: str, predicate: DirectoryPredicate) -> List[str]:
        return queries.find_matching(self.database, start, predicate)

    def shutdown(self) -> None:
        """
        Waits for the walk and persists the refreshed cache.
        A cancelled walk leaves the previous cache file untouched.
        """
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True

        result = self.wait()
        if not result.summary.complete:
            logger.warning(f"Finder walk was cancelled, keeping the previous cache at {self.cache_path}")
            return
        self.store.save(result.database, self.cache_path)

    def __enter__(self) -> "Finder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.shutdown()
        else:
            self.cancel()
