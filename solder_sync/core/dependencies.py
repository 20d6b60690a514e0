from typing import Optional

from solder_sync.core.config import SyncSettings, load_settings
from solder_sync.storage.json_state_store import JsonStateStore
from solder_sync.storage.state_store import StateStore

_settings: Optional[SyncSettings] = None
_state_store: Optional[StateStore] = None


def get_settings() -> SyncSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_state_store() -> StateStore:
    global _state_store
    if _state_store is None:
        _state_store = JsonStateStore(get_settings().state_path)
    return _state_store


def reset() -> None:
    """Forget cached instances (used when the environment changes, e.g. in tests)."""
    global _settings, _state_store
    _settings = None
    _state_store = None
