import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from solder_sync.domain.errors import StateStoreError
from solder_sync.domain.models import LEDGER_SCHEMA_VERSION, Ledger
from solder_sync.storage.state_store import StateStore

logger = logging.getLogger(__name__)

STATE_FILENAME = ".mod_status.json"


def _migrate_legacy(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a state document written by the original Node tool.

    That format used ``modpack``/``build``/``mcversion`` for the identifiers,
    ``buildInfo`` for entries (with an ``md5`` checksum) and ``trackedFiles``
    for installed paths.
    """
    if "schema_version" in raw:
        return raw

    migrated: Dict[str, Any] = {"schema_version": LEDGER_SCHEMA_VERSION}
    if "modpack" in raw:
        migrated["package_id"] = raw["modpack"]
    if "build" in raw:
        migrated["build_id"] = str(raw["build"])
    if raw.get("mcversion") is not None:
        migrated["target_platform_version"] = str(raw["mcversion"])

    entries = {}
    for name, mod in (raw.get("buildInfo") or {}).items():
        entries[name] = {
            "name": mod.get("name", name),
            "version": str(mod.get("version", "")),
            "url": mod.get("url", ""),
            "checksum": mod.get("md5", mod.get("checksum", "")),
        }
    migrated["entries"] = entries

    tracked = {}
    for name, paths in (raw.get("trackedFiles") or {}).items():
        # Directory members were recorded with their trailing slash.
        tracked[name] = [p.rstrip("/") for p in paths or [] if p.rstrip("/")]
    migrated["tracked_files"] = tracked
    return migrated


def _fsync_directory(directory: Path) -> None:
    """Flush a rename in ``directory`` to disk (POSIX only)."""
    if os.name != "posix":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class JsonStateStore(StateStore):
    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Ledger:
        if not self._path.exists():
            logger.debug(f"No state file at {self._path}, starting from an empty ledger")
            return Ledger()

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StateStoreError(f"Cannot read state file {self._path}: {e}") from e

        if not isinstance(raw, dict):
            raise StateStoreError(f"State file {self._path} does not hold a JSON object")

        try:
            return Ledger(**_migrate_legacy(raw))
        except (ValidationError, AttributeError, TypeError) as e:
            raise StateStoreError(f"Invalid state file {self._path}: {e}") from e

    def commit(self, ledger: Ledger) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        # Write next to the target so the final rename stays on one filesystem.
        fd, tmp_name = tempfile.mkstemp(prefix=self._path.name + ".", suffix=".tmp", dir=directory)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(ledger.model_dump_json(indent=2))
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self._path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StateStoreError(f"Cannot write state file {self._path}: {e}") from e

        try:
            _fsync_directory(directory)
        except OSError as e:
            raise StateStoreError(f"Cannot flush directory {directory}: {e}") from e

        logger.debug(f"Committed ledger for [{ledger.package_id} / {ledger.build_id}] to {self._path}")
