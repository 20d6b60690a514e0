"""
Remove the files an entry installed, using the paths recorded in the ledger.
"""
from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, List

logger = logging.getLogger(__name__)


def _depth(rel_path: str) -> int:
    return len(PurePosixPath(rel_path).parts)


def remove_tracked_files(root: Path, paths: Iterable[str]) -> List[str]:
    """
    Delete the tracked paths of one entry.

    Files go first. Directories are removed afterwards, deepest first, and
    only if they are empty: a directory still holding files of another
    entry (or of the user) is left in place without error.

    Returns the paths that were actually removed.
    """
    removed: List[str] = []
    dirs: List[str] = []

    for rel_path in paths or []:
        target = root / rel_path
        if target.is_dir() and not target.is_symlink():
            dirs.append(rel_path)
        elif target.exists() or target.is_symlink():
            target.unlink(missing_ok=True)
            removed.append(rel_path)

    # Reverse recording order puts children before their parents; the
    # stable sort by depth covers archives that list parents late.
    for rel_path in sorted(reversed(dirs), key=_depth, reverse=True):
        try:
            (root / rel_path).rmdir()
            removed.append(rel_path)
        except OSError as e:
            logger.debug(f"Keeping directory {rel_path}: {e}")

    return removed
