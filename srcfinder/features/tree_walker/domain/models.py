from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from srcfinder.core.enums import DirectoryOutcome
from srcfinder.features.tree_cache.domain.models import CacheDatabase, DirectoryEntry

@dataclass(frozen=True)
class VisitResult:
    """
    What one worker found for one directory.
    `entry` is None for removed or skipped directories.
    """
    path: str
    outcome: DirectoryOutcome
    entry: Optional[DirectoryEntry] = None
    children: Tuple[str, ...] = ()
    error: Optional[str] = None

@dataclass
class WalkSummary:
    """
    Report returned after a walk completes (or is cancelled).
    """
    dirs_listed: int = 0
    dirs_reused: int = 0
    dirs_removed: int = 0
    dirs_skipped: int = 0
    complete: bool = False
    errors: List[str] = field(default_factory=list)

    def record(self, result: VisitResult) -> None:
        if result.outcome == DirectoryOutcome.LISTED:
            self.dirs_listed += 1
        elif result.outcome == DirectoryOutcome.REUSED:
            self.dirs_reused += 1
        elif result.outcome == DirectoryOutcome.REMOVED:
            self.dirs_removed += 1
        else:
            self.dirs_skipped += 1
        if result.error:
            self.errors.append(result.error)

@dataclass
class WalkResult:
    database: CacheDatabase
    summary: WalkSummary
