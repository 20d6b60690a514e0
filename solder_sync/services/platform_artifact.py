"""
Copy the launcher artifact (the modpack server jar) after a successful sync.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from solder_sync.domain.errors import ArtifactCopyError

logger = logging.getLogger(__name__)

VERSION_PLACEHOLDER = "%MCVERSION%"


def resolve_artifact_source(template: str, target_platform_version: Optional[str]) -> Path:
    return Path(template.replace(VERSION_PLACEHOLDER, target_platform_version or ""))


def copy_platform_artifact(
    package_id: str,
    target_platform_version: Optional[str],
    source_template: Optional[str],
    destination: Optional[str],
) -> Optional[Path]:
    """
    Copy the artifact for ``target_platform_version`` to ``destination``.

    Does nothing unless both the source template and the destination are
    configured. Returns the destination path when a copy was made.
    """
    if not source_template or not destination:
        return None

    source = resolve_artifact_source(source_template, target_platform_version)
    dest = Path(destination)
    logger.info(f"Copying JAR for [{package_id}] from [{source}] to [{dest}]")
    try:
        shutil.copyfile(source, dest)
    except OSError as e:
        raise ArtifactCopyError(f"Failed to copy [{source}] to [{dest}]: {e}") from e
    return dest
