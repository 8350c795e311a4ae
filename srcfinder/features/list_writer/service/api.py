import logging
import os
from pathlib import Path
from typing import Sequence

from srcfinder.core.errors import ListWriteError

logger = logging.getLogger(__name__)


def render_list(paths: Sequence[str]) -> bytes:
    """
    One path per line, no trailing newline.
    Paths go back to the exact bytes the filesystem reported, so names that
    are not valid UTF-8 survive unchanged.
    """
    return b"\n".join(os.fsencode(p) for p in paths)


def write_if_changed(paths: Sequence[str], target: Path) -> bool:
    """
    Public Service API: write `paths` to `target` unless it already holds
    exactly that content.

    Downstream steps watch the file's mtime, so an identical rewrite would
    trigger work for nothing.

    Returns:
        True if the file was written, False if it was left untouched.

    Raises:
        ListWriteError: `target` exists but cannot be read, or cannot be written.
    """
    target = Path(target)
    desired = render_list(paths)

    try:
        actual = target.read_bytes()
    except FileNotFoundError:
        actual = None
    except OSError as e:
        raise ListWriteError(f"Could not read list file {target} for comparison: {e}") from e

    if actual == desired:
        logger.debug(f"{target} is up to date ({len(paths)} entries)")
        return False

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(desired)
    except OSError as e:
        raise ListWriteError(f"Could not write list file {target}: {e}") from e

    logger.info(f"Wrote {len(paths)} entries to {target}")
    return True
