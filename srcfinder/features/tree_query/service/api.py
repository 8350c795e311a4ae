import os
from typing import Callable, Iterable, List, Tuple

from srcfinder.features.tree_cache.domain.models import CacheDatabase, DirectoryEntry, join_path

# Given one directory, returns (subdirectory names to descend into, file names that match).
DirectoryPredicate = Callable[[DirectoryEntry], Tuple[Iterable[str], Iterable[str]]]


def find_first_named_at(database: CacheDatabase, start: str, name: str) -> List[str]:
    """
    Public Service API: the first `name` on every branch below `start`.

    A directory holding `name` is reported as `<dir>/<name>` and its
    subdirectories are not visited. Results are in depth-first pre-order.
    """
    matches = []
    stack = [os.path.normpath(start)]
    while stack:
        path = stack.pop()
        entry = database.get(path)
        if entry is None:
            # Excluded, pruned, unreadable or never scanned.
            continue
        if name in entry.file_names:
            matches.append(join_path(path, name))
            continue
        stack.extend(join_path(path, d) for d in reversed(entry.dir_names))
    return matches


def find_matching(database: CacheDatabase, start: str, predicate: DirectoryPredicate) -> List[str]:
    """
    Public Service API: every file the predicate selects below `start`.

    The predicate sees each directory once and alone decides both which
    subdirectories to continue into and which of its files match. Names it
    returns that are not children of the directory are ignored, and output
    follows listing order whatever order the predicate used.
    """
    matches = []
    stack = [os.path.normpath(start)]
    while stack:
        path = stack.pop()
        entry = database.get(path)
        if entry is None:
            continue

        dirs, files = predicate(entry)
        wanted_files = set(files)
        wanted_dirs = set(dirs)

        matches.extend(join_path(path, f) for f in entry.file_names if f in wanted_files)
        stack.extend(join_path(path, d) for d in reversed(entry.dir_names) if d in wanted_dirs)
    return matches
