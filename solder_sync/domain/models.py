"""
Pydantic models for solder-sync.

This module defines the records that flow through a reconciliation run:
- Manifest entries and the build manifest fetched from a Solder API
- The persisted ledger of installed entries and their tracked files
- Planner output and per-entry install outcomes

All models use Pydantic for validation, serialization, and type safety.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


LEDGER_SCHEMA_VERSION = 1

# Placeholder written by the original tool for "nothing installed yet".
UNSET_ID = "N/A"


# ---------------------------------------------------------------------------
# Manifest Models
# ---------------------------------------------------------------------------


class Entry(BaseModel):
    """
    One installable mod archive within a build manifest.

    The version is an opaque token: two entries are the same release only
    when their versions are equal strings.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique key of the entry within a manifest.")
    version: str = Field(description="Opaque version token compared by equality.")
    url: str = Field(description="Location the archive is fetched from.")
    checksum: str = Field(description="Expected hex digest of the archive bytes.")


class Manifest(BaseModel):
    """
    Desired state for one build of a modpack, as published by Solder.
    """

    model_config = ConfigDict(frozen=True)

    package_id: str = Field(description="Modpack slug, e.g. 'tekkitmain'.")
    build_id: str = Field(description="Concrete build identifier (never 'latest'/'recommended').")
    target_platform_version: Optional[str] = Field(
        default=None,
        description="Minecraft version the build targets; substituted into the artifact path.",
    )
    entries: List[Entry] = Field(
        default_factory=list,
        description="Entries in provider order. Names are expected to be unique.",
    )


# ---------------------------------------------------------------------------
# Persisted State
# ---------------------------------------------------------------------------


class Ledger(BaseModel):
    """
    Persisted record of the last successfully installed build.

    ``tracked_files`` maps an entry name to every path its archive created,
    relative to the working directory and in the order they were written.
    """

    schema_version: int = Field(default=LEDGER_SCHEMA_VERSION)
    package_id: str = Field(default=UNSET_ID)
    build_id: str = Field(default=UNSET_ID)
    target_platform_version: Optional[str] = Field(default=None)
    entries: Dict[str, Entry] = Field(default_factory=dict)
    tracked_files: Dict[str, List[str]] = Field(default_factory=dict)

    def is_build(self, package_id: str, build_id: str) -> bool:
        return self.package_id == package_id and self.build_id == build_id


# ---------------------------------------------------------------------------
# Run Models
# ---------------------------------------------------------------------------


class ReconciliationPlan(BaseModel):
    """
    Partition of entry names into what to keep, install and delete.
    """

    unchanged: List[str] = Field(default_factory=list)
    to_install: List[str] = Field(default_factory=list)
    obsolete: List[str] = Field(default_factory=list)


class InstallOutcome(BaseModel):
    """Result of installing one entry: either the written paths or an error."""

    entry: Entry
    installed_paths: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, entry: Entry, paths: List[str]) -> "InstallOutcome":
        return cls(entry=entry, installed_paths=paths)

    @classmethod
    def failure(cls, entry: Entry, error: Exception) -> "InstallOutcome":
        return cls(entry=entry, error=str(error) or type(error).__name__)


class ArchiveItem(BaseModel):
    """A single decoded archive member."""

    path: str
    is_dir: bool = False
    data: bytes = b""
