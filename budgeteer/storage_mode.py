"""
Storage mode selection.

The application can run against three interchangeable backends:

  - cloud: the hosted Supabase database (native FK/unique constraints)
  - demo:  the in-memory demo store (no constraint engine)
  - local: the embedded SQLite database (no constraint engine)

Exactly one mode is active per process. StorageModeManager holds that
value and lets interested parties (the provider factory, the validation
service) react when it changes.
"""

import enum
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class StorageMode(str, enum.Enum):
    CLOUD = "cloud"
    DEMO = "demo"
    LOCAL = "local"


class StorageModeManager:
    """Holds the currently active storage mode."""

    def __init__(self, mode: StorageMode = StorageMode.DEMO):
        self._mode = StorageMode(mode)
        self._listeners: list[Callable[[StorageMode, StorageMode], None]] = []

    @property
    def mode(self) -> StorageMode:
        return self._mode

    def subscribe(self, listener: Callable[[StorageMode, StorageMode], None]) -> None:
        """Register a callback invoked as listener(old_mode, new_mode) on switch."""
        self._listeners.append(listener)

    def switch(self, mode: StorageMode) -> None:
        new_mode = StorageMode(mode)
        if new_mode == self._mode:
            return
        old_mode, self._mode = self._mode, new_mode
        logger.info("Storage mode switched from %s to %s", old_mode.value, new_mode.value)
        for listener in self._listeners:
            listener(old_mode, new_mode)
