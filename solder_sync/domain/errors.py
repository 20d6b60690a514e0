"""
Exceptions raised during a reconciliation run.

Errors raised before any filesystem mutation (resolution, manifest,
duplicate entries, unreadable state) abort the run. Per-entry errors are
caught by the installer and reported through ``InstallOutcome``; the run
only fails for them once the whole batch has drained.
"""

from __future__ import annotations

from typing import Iterable, List


class SyncError(Exception):
    """Base class for every error the CLI reports as a failed run."""


class ResolutionError(SyncError):
    """No manifest location is published for the package."""

    def __init__(self, package_id: str, reason: str = "Could not find solder"):
        self.package_id = package_id
        super().__init__(f"Error on modpack [{package_id}] on getting solder URL: {reason}")


class ManifestError(SyncError):
    """The provider answered with an error payload instead of a manifest."""

    def __init__(self, package_id: str, base_url: str, message: str):
        self.package_id = package_id
        self.base_url = base_url
        self.message = message
        super().__init__(f"Error on modpack [{package_id}] from solder [{base_url}]: {message}")


class DuplicateEntryError(SyncError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate mod: {name}")


class TransportError(SyncError):
    """Network or HTTP status failure while fetching a URL."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Failed to fetch [{url}]: {reason}")


class ChecksumExhaustedError(SyncError):
    def __init__(self, url: str, attempts: int, expected: str, actual: str):
        self.url = url
        self.attempts = attempts
        super().__init__(
            f"Checksum mismatch for [{url}] after {attempts} attempts: expected {expected}, got {actual}"
        )


class ArchiveError(SyncError):
    """Archive bytes could not be decoded or contain an unsafe member."""


class StateStoreError(SyncError):
    """The persisted ledger exists but cannot be read."""


class ArtifactCopyError(SyncError):
    """The platform artifact could not be copied to its destination."""


class AggregateFailure(SyncError):
    """At least one entry failed; the ledger was not committed."""

    def __init__(self, failed: Iterable[str]):
        self.failed: List[str] = list(failed)
        super().__init__(f"Errors occurred installing {len(self.failed)} mod(s): {', '.join(self.failed)}")
