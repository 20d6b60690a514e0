"""
Runtime settings, read from the environment.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from solder_sync.services.installer import DEFAULT_CHECKSUM_RETRIES
from solder_sync.services.solder_client import TECHNIC_PLATFORM_API, TECHNIC_SOLDER_URL
from solder_sync.services.transport import DEFAULT_MAX_CONNECTIONS, DEFAULT_TIMEOUT
from solder_sync.storage.json_state_store import STATE_FILENAME

WORK_DIR_ENV_VAR = "SOLDER_SYNC_DIR"
STATE_FILE_ENV_VAR = "SOLDER_SYNC_STATE_FILE"
LOG_LEVEL_ENV_VAR = "SOLDER_SYNC_LOG_LEVEL"
MAX_CONNECTIONS_ENV_VAR = "SOLDER_SYNC_MAX_CONNECTIONS"
CHECKSUM_RETRIES_ENV_VAR = "SOLDER_SYNC_CHECKSUM_RETRIES"
HTTP_TIMEOUT_ENV_VAR = "SOLDER_SYNC_HTTP_TIMEOUT"
SOLDER_URL_ENV_VAR = "SOLDER_SYNC_SOLDER_URL"
PLATFORM_API_ENV_VAR = "SOLDER_SYNC_PLATFORM_API"

# Names kept from the original tool so existing server scripts keep working.
ARTIFACT_SOURCE_ENV_VAR = "JAR_REPO"
ARTIFACT_DEST_ENV_VAR = "JAR_DEST"


class SyncSettings(BaseModel):
    """Configuration for one reconciliation run."""

    work_dir: Path = Field(
        default_factory=Path.cwd,
        description="Directory mods are extracted into; also holds the state file.",
    )
    state_filename: str = Field(default=STATE_FILENAME)
    log_level: str = Field(default="INFO")
    max_connections: int = Field(default=DEFAULT_MAX_CONNECTIONS, ge=1)
    checksum_retries: int = Field(default=DEFAULT_CHECKSUM_RETRIES, ge=0)
    http_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    solder_url: str = Field(default=TECHNIC_SOLDER_URL)
    platform_api: str = Field(default=TECHNIC_PLATFORM_API)
    artifact_source: Optional[str] = Field(
        default=None,
        description="Path template of the server jar; '%MCVERSION%' is replaced by the build's Minecraft version.",
    )
    artifact_dest: Optional[str] = Field(
        default=None,
        description="Where the server jar is copied to after a successful sync.",
    )

    @property
    def state_path(self) -> Path:
        return self.work_dir / self.state_filename


def load_settings(environ: Optional[Mapping[str, str]] = None) -> SyncSettings:
    """
    Build settings from environment variables.

    Unset or empty variables fall back to the model defaults.
    """
    env = os.environ if environ is None else environ
    mapping = {
        "work_dir": WORK_DIR_ENV_VAR,
        "state_filename": STATE_FILE_ENV_VAR,
        "log_level": LOG_LEVEL_ENV_VAR,
        "max_connections": MAX_CONNECTIONS_ENV_VAR,
        "checksum_retries": CHECKSUM_RETRIES_ENV_VAR,
        "http_timeout": HTTP_TIMEOUT_ENV_VAR,
        "solder_url": SOLDER_URL_ENV_VAR,
        "platform_api": PLATFORM_API_ENV_VAR,
        "artifact_source": ARTIFACT_SOURCE_ENV_VAR,
        "artifact_dest": ARTIFACT_DEST_ENV_VAR,
    }
    values = {field: env[var] for field, var in mapping.items() if env.get(var)}
    if "work_dir" in values:
        values["work_dir"] = Path(values["work_dir"]).expanduser()

    try:
        return SyncSettings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
