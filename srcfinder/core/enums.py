from enum import Enum, unique

@unique
class DirectoryOutcome(str, Enum):
    LISTED = "listed"
    REUSED = "reused"
    REMOVED = "removed"
    SKIPPED = "skipped"

@unique
class ModuleListFile(str, Enum):
    ANDROID_MK = "Android.mk.list"
    CLEAN_SPEC = "CleanSpec.mk.list"
    ANDROID_BP = "Android.bp.list"
