"""
Decode mod archives and write their members below a working directory.
"""
from __future__ import annotations

import io
import logging
import os
import posixpath
import re
import zipfile
import zlib
from pathlib import Path
from typing import Iterator, List

import aiofiles

from solder_sync.domain.errors import ArchiveError
from solder_sync.domain.models import ArchiveItem

logger = logging.getLogger(__name__)

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:/")


def normalize_member_path(name: str) -> str:
    """
    Normalize an archive member name to a relative POSIX path.

    Members that are absolute or climb out of the extraction root are
    rejected rather than silently rewritten. A member naming the root
    itself ("./") normalizes to ".".
    """
    p = (name or "").replace("\\", "/").strip()
    if p == "" or p.startswith("/") or _DRIVE_PREFIX.match(p):
        raise ArchiveError(f"Invalid archive member path: {name!r}")

    norm = posixpath.normpath(p)
    if norm == ".." or norm.startswith("../"):
        raise ArchiveError(f"Archive member escapes extraction root: {name!r}")
    return norm


def iter_archive(data: bytes) -> Iterator[ArchiveItem]:
    """Yield every member of a zip archive in stored order."""
    try:
        zip_ref = zipfile.ZipFile(io.BytesIO(data), "r")
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Not a valid zip archive: {e}") from e

    with zip_ref:
        for info in zip_ref.infolist():
            path = normalize_member_path(info.filename)
            if path == ".":
                continue
            if info.is_dir():
                yield ArchiveItem(path=path, is_dir=True)
                continue
            try:
                content = zip_ref.read(info)
            except (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError) as e:
                raise ArchiveError(f"Failed to read {info.filename!r}: {e}") from e
            yield ArchiveItem(path=path, data=content)


def _resolve_inside(root: Path, rel_path: str) -> Path:
    root_real = os.path.realpath(root)
    full = os.path.realpath(os.path.join(root_real, rel_path))
    if not (full == root_real or full.startswith(root_real + os.sep)):
        raise ArchiveError(f"Archive member escapes extraction root: {rel_path!r}")
    return Path(full)


async def extract_archive(data: bytes, root: Path) -> List[str]:
    """
    Write an archive's members below ``root``.

    Returns the member paths (relative to ``root``) in the order they were
    written, each path recorded once. Parent directories that the archive
    does not list itself are created but not recorded.
    """
    written: List[str] = []
    seen = set()

    for item in iter_archive(data):
        target = _resolve_inside(root, item.path)
        if item.is_dir:
            target.mkdir(mode=0o755, parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(item.data)

        if item.path not in seen:
            seen.add(item.path)
            written.append(item.path)

    logger.debug(f"Extracted {len(written)} paths into {root}")
    return written
