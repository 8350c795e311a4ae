# File: srcfinder/core/config/settings.py

import os
from pathlib import Path


class Settings:
    # --- Paths ---
    OUT_DIR: Path = Path(os.getenv("OUT_DIR", "out"))
    CACHE_FILENAME: str = os.getenv("SRCFINDER_CACHE_FILENAME", "files.db")

    # --- Scanning ---
    # The walk is I/O bound, so oversubscribe the CPUs a little.
    SCAN_WORKERS: int = int(os.getenv("SRCFINDER_SCAN_WORKERS", str(min(32, (os.cpu_count() or 1) * 4))))

    @property
    def FILE_LIST_DIR(self) -> Path:
        override = os.getenv("SRCFINDER_FILE_LIST_DIR")
        if override:
            return Path(override)
        return self.OUT_DIR / ".module_paths"

    def ensure_dirs(self):
        """Creates the file-list directory if it doesn't exist."""
        self.FILE_LIST_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
