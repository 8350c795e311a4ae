import logging
import os
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Optional, Set, Tuple

from srcfinder.core.enums import DirectoryOutcome
from srcfinder.core.errors import FatalScanError
from srcfinder.features.tree_cache.domain.interfaces import ICacheStore
from srcfinder.features.tree_cache.domain.models import (
    CacheDatabase,
    DirectoryEntry,
    TraversalRules,
    join_path,
)
from ..data.local_fs import LocalDirectoryLister
from ..domain.interfaces import IDirectoryLister
from ..domain.models import VisitResult, WalkResult, WalkSummary

logger = logging.getLogger(__name__)

class IncrementalWalker:
    """
    Brings a CacheDatabase up to date with the filesystem.
    Only directories whose stat signal changed since the previous session are
    listed again; everything else is reused from the previous database.
    """

    def __init__(self,
                 rules: TraversalRules,
                 store: ICacheStore,
                 lister: Optional[IDirectoryLister] = None,
                 workers: int = 1):
        if workers < 1:
            raise ValueError(f"Walker needs at least one worker, got {workers}.")
        self.rules = rules
        self.store = store
        self.lister = lister or LocalDirectoryLister()
        self.workers = workers
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Stops enqueueing directories. Safe to call from any thread."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def walk(self, previous: CacheDatabase) -> WalkResult:
        """
        Walks every root depth-first and returns a brand-new database holding
        only the directories reached in this session.

        Raises:
            FatalScanError: the working directory or a root cannot be read.
        """
        if not os.path.isdir(self.rules.working_directory):
            raise FatalScanError(f"No working directory for module-finder: {self.rules.working_directory}")

        fingerprint = self.rules.fingerprint()
        if previous.fingerprint != fingerprint and len(previous):
            logger.info("Traversal rules changed since the cache was written, rescanning everything.")
            previous = CacheDatabase()

        summary = WalkSummary()
        entries = {}
        # Owned by this (coordinating) thread only: each path is claimed once,
        # so exactly one worker ever produces its entry.
        claimed: Set[str] = set()
        pending: Set[Future] = set()

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="srcfinder-walk") as pool:
            try:
                for root in self.rules.root_dirs:
                    if root not in claimed:
                        claimed.add(root)
                        pending.add(pool.submit(self._visit, root, previous, True))

                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        result = future.result()
                        summary.record(result)
                        if result.entry is not None:
                            entries[result.path] = result.entry

                        if self._cancelled.is_set():
                            continue
                        for child in result.children:
                            if child not in claimed:
                                claimed.add(child)
                                pending.add(pool.submit(self._visit, child, previous, False))
            except BaseException:
                self._cancelled.set()
                pool.shutdown(wait=True, cancel_futures=True)
                raise

        summary.complete = not self._cancelled.is_set()
        state = "complete" if summary.complete else "cancelled"
        logger.info(
            f"Walk {state}: {summary.dirs_listed} listed, {summary.dirs_reused} reused, "
            f"{summary.dirs_removed} removed, {summary.dirs_skipped} skipped"
        )
        return WalkResult(database=CacheDatabase(fingerprint=fingerprint, entries=entries), summary=summary)

    def _visit(self, path: str, previous: CacheDatabase, is_root: bool) -> VisitResult:
        abs_path = self.rules.absolute(path)
        try:
            live = self.lister.stat(abs_path)
            prior = previous.get(path)
            if self.store.is_stale(prior, live):
                dir_names, file_names = self.lister.list_dir(abs_path)
                entry = DirectoryEntry(path=path, dir_names=dir_names, file_names=file_names, signal=live)
                outcome = DirectoryOutcome.LISTED
            else:
                entry = prior
                outcome = DirectoryOutcome.REUSED
        except (FileNotFoundError, NotADirectoryError) as e:
            if is_root:
                raise FatalScanError(f"Root directory {abs_path} does not exist: {e}") from e
            logger.debug(f"Directory {path} disappeared during the scan")
            return VisitResult(path=path, outcome=DirectoryOutcome.REMOVED)
        except OSError as e:
            if is_root:
                raise FatalScanError(f"Could not list root directory {abs_path}: {e}") from e
            logger.warning(f"Skipping unreadable directory {path}: {e}")
            return VisitResult(path=path, outcome=DirectoryOutcome.SKIPPED, error=f"Could not list {path}: {e}")

        logger.debug(f"{outcome.value} {path}")
        return VisitResult(path=path, outcome=outcome, entry=entry, children=self._children_of(entry))

    def _children_of(self, entry: DirectoryEntry) -> Tuple[str, ...]:
        # A prune marker keeps this directory's own entry but stops the descent.
        if self.rules.prune_files.intersection(entry.file_names):
            return ()
        return tuple(
            join_path(entry.path, name)
            for name in entry.dir_names
            if name not in self.rules.exclude_dirs
        )
