import logging
from typing import Dict

from srcfinder.core.enums import ModuleListFile
from srcfinder.features.finder.service.api import Finder
from srcfinder.features.list_writer.service.api import write_if_changed
from srcfinder.features.tree_cache.domain.models import DirectoryEntry
from ..domain.models import ANDROID_BP, ANDROID_MK, BLUEPRINTS, CLEAN_SPEC, BuildConfig

logger = logging.getLogger(__name__)


def new_source_finder(config: BuildConfig) -> Finder:
    """
    Public Service API: a Finder configured to search for build files.
    Callers should call `shutdown()` (or use it as a context manager) when done
    so the refreshed cache is saved.

    Raises:
        FatalScanError: the working directory is missing.
    """
    logger.info(f"Finding modules under {config.working_directory}")
    return Finder(
        config.traversal_rules(),
        config.cache_path,
        workers=config.scan_workers,
    )


def is_blueprint_file(entry: DirectoryEntry):
    """Descend everywhere, match every Android.bp and Blueprints file."""
    files = [name for name in entry.file_names if name in (ANDROID_BP, BLUEPRINTS)]
    return entry.dir_names, files


def find_sources(config: BuildConfig, finder: Finder) -> Dict[ModuleListFile, bool]:
    """
    Public Service API: writes the three module list files.

    `config.file_list_dir` may differ from the one the finder was created
    with, which lets several builds share one finder.

    Returns:
        For each list file, whether it was rewritten.

    Raises:
        FatalScanError: the walk could not read the source root.
        ListWriteError: a list file could not be written.
    """
    config.file_list_dir.mkdir(parents=True, exist_ok=True)

    lists = {
        ModuleListFile.ANDROID_MK: finder.find_first_named_at(".", ANDROID_MK),
        ModuleListFile.CLEAN_SPEC: finder.find_first_named_at(".", CLEAN_SPEC),
        ModuleListFile.ANDROID_BP: finder.find_matching(".", is_blueprint_file),
    }

    written = {}
    for list_file, paths in lists.items():
        written[list_file] = write_if_changed(paths, config.file_list_dir / list_file.value)
    return written
