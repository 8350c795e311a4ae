import os
from dataclasses import dataclass
from pathlib import Path

from srcfinder.core.config.settings import settings
from srcfinder.core.errors import FatalScanError
from srcfinder.features.tree_cache.domain.models import TraversalRules

# Version-control metadata is never part of the source tree.
EXCLUDE_DIRS = frozenset({".git", ".repo"})
# A directory holding one of these is the top of an output tree or opted out.
PRUNE_FILES = frozenset({".out-dir", ".find-ignore"})

ANDROID_MK = "Android.mk"
ANDROID_BP = "Android.bp"
BLUEPRINTS = "Blueprints"
CLEAN_SPEC = "CleanSpec.mk"
INCLUDE_FILES = frozenset({ANDROID_MK, ANDROID_BP, BLUEPRINTS, CLEAN_SPEC})

@dataclass(frozen=True)
class BuildConfig:
    """
    The slice of the build configuration source discovery needs.
    Passed explicitly so several build variants can share one process.
    """
    working_directory: Path
    file_list_dir: Path
    scan_workers: int = 1

    def __post_init__(self):
        if not str(self.working_directory).strip():
            raise ValueError("Working directory cannot be empty.")

    @classmethod
    def from_settings(cls) -> "BuildConfig":
        try:
            cwd = os.getcwd()
        except OSError as e:
            raise FatalScanError(f"No working directory for module-finder: {e}") from e
        settings.ensure_dirs()
        return cls(
            working_directory=Path(cwd),
            file_list_dir=settings.FILE_LIST_DIR,
            scan_workers=settings.SCAN_WORKERS,
        )

    @property
    def cache_path(self) -> Path:
        return self.file_list_dir / settings.CACHE_FILENAME

    def traversal_rules(self) -> TraversalRules:
        return TraversalRules(
            working_directory=str(self.working_directory),
            root_dirs=(".",),
            exclude_dirs=EXCLUDE_DIRS,
            prune_files=PRUNE_FILES,
            include_files=INCLUDE_FILES,
        )
