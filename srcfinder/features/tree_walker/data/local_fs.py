import os
from typing import Tuple

from srcfinder.features.tree_cache.domain.models import StatSignal
from ..domain.interfaces import IDirectoryLister

class LocalDirectoryLister(IDirectoryLister):
    """
    Concrete implementation using os.scandir.
    """

    def stat(self, path: str) -> StatSignal:
        st = os.stat(path)
        return StatSignal(mtime_ns=st.st_mtime_ns, inode=st.st_ino)

    def list_dir(self, path: str) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        dir_names = []
        file_names = []
        with os.scandir(path) as entries:
            for entry in entries:
                # Symlinks are recorded as files and never followed, so a link
                # back up the tree cannot make the walk loop.
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                if is_dir:
                    dir_names.append(entry.name)
                else:
                    file_names.append(entry.name)

        # Sorted so that list files are reproducible across filesystems.
        return tuple(sorted(dir_names)), tuple(sorted(file_names))
