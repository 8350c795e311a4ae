# File: tests/conftest.py

import os
import sys
import threading

import pytest

# 1. Add project root to path
sys.path.append(os.getcwd())

from srcfinder.features.tree_walker.data.local_fs import LocalDirectoryLister


class CountingLister(LocalDirectoryLister):
    """
    Real filesystem lister that records every directory it actually lists.
    Stat calls (staleness checks) are not recorded.
    """

    def __init__(self):
        self.listed = []
        self._lock = threading.Lock()

    def list_dir(self, path):
        with self._lock:
            self.listed.append(os.path.normpath(path))
        return super().list_dir(path)

    def listed_under(self, root):
        """Listed directories relative to `root`, sorted."""
        return sorted(os.path.relpath(p, root) for p in self.listed)


class FailingLister(LocalDirectoryLister):
    """
    Raises PermissionError when listing the given root-relative paths.
    Used instead of chmod so the tests also hold when run as root.
    """

    def __init__(self, root, *failing):
        self.failing = {os.path.normpath(os.path.join(str(root), p)) for p in failing}

    def list_dir(self, path):
        if os.path.normpath(path) in self.failing:
            raise PermissionError(13, "Permission denied", path)
        return super().list_dir(path)


@pytest.fixture
def lister_types():
    return CountingLister, FailingLister


@pytest.fixture
def build_tree():
    """
    Returns a helper creating files (and their parent directories) under a root.
    Paths ending with '/' create an empty directory instead.
    """
    def _build(root, *paths):
        root.mkdir(parents=True, exist_ok=True)
        for rel in paths:
            if rel.endswith("/"):
                (root / rel).mkdir(parents=True, exist_ok=True)
            else:
                target = root / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text("")
        return root
    return _build


@pytest.fixture
def touch_dir():
    """
    Moves a directory's mtime one second forward.
    Coarse filesystem clocks can otherwise leave it unchanged after an edit.
    """
    def _touch(path):
        st = os.stat(path)
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))
    return _touch
