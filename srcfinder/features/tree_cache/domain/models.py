import hashlib
import json
import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

# Bump whenever the on-disk layout changes; older caches are then rejected.
CACHE_VERSION = 2


@dataclass(frozen=True)
class StatSignal:
    """
    What a directory looked like the last time it was listed.
    Adding, removing or renaming a child bumps the mtime; replacing the
    directory itself changes the inode.
    """
    mtime_ns: int
    inode: int


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One scanned directory.
    Child names are the complete listing at scan time, sorted.
    """
    path: str
    dir_names: Tuple[str, ...]
    file_names: Tuple[str, ...]
    signal: StatSignal


def _frozen(names: Iterable[str]) -> FrozenSet[str]:
    if isinstance(names, str):
        raise TypeError(f"Expected a collection of names, got the string {names!r}")
    return frozenset(names)


@dataclass(frozen=True)
class TraversalRules:
    """
    Immutable per-session configuration for a walk.
    Root directories are relative to the working directory.
    """
    working_directory: str
    root_dirs: Tuple[str, ...] = (".",)
    exclude_dirs: FrozenSet[str] = frozenset()
    prune_files: FrozenSet[str] = frozenset()
    include_files: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if isinstance(self.root_dirs, str):
            raise TypeError("root_dirs must be a sequence of paths, not a single string.")
        roots = tuple(os.path.normpath(r) for r in self.root_dirs)
        if not roots:
            raise ValueError("At least one root directory is required.")
        object.__setattr__(self, "root_dirs", roots)
        object.__setattr__(self, "exclude_dirs", _frozen(self.exclude_dirs))
        object.__setattr__(self, "prune_files", _frozen(self.prune_files))
        object.__setattr__(self, "include_files", _frozen(self.include_files))

    def absolute(self, path: str) -> str:
        """Filesystem path for a root-relative cache key."""
        return os.path.join(self.working_directory, path)

    def fingerprint(self) -> str:
        payload = json.dumps(
            {
                "version": CACHE_VERSION,
                "working_directory": self.working_directory,
                "root_dirs": list(self.root_dirs),
                "exclude_dirs": sorted(self.exclude_dirs),
                "prune_files": sorted(self.prune_files),
                "include_files": sorted(self.include_files),
            },
            sort_keys=True,
        )
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()


@dataclass
class CacheDatabase:
    """
    The full persisted state: directory path -> entry, plus the fingerprint of
    the rules it was built under.
    """
    fingerprint: str = ""
    entries: Dict[str, DirectoryEntry] = field(default_factory=dict)

    def get(self, path: str) -> Optional[DirectoryEntry]:
        return self.entries.get(path)

    def __len__(self) -> int:
        return len(self.entries)


def join_path(directory: str, name: str) -> str:
    """Root-relative child path: ('.', 'a') -> 'a', ('a', 'b') -> 'a/b'."""
    return os.path.normpath(os.path.join(directory, name))
