"""Building blocks of daemon-driven background sync."""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Union
import os

from ctxdaemon import clock

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_SYNC_DELAY = 5.0
DEFAULT_TRIGGER_POLL_PERIOD = 1.0
DEFAULT_TRIGGER_DEBOUNCE = 2.0
MINIMUM_SYNC_INTERVAL_MS = 1000
TRIGGER_FILE_NAME = ".sync-trigger"

_CONFLICT_MARKERS = ("conflicting active job", "codebase not tracked")


def sync_interval_seconds(sync_interval_ms: int) -> float:
    """Return the periodic sweep interval in seconds, never below the minimum."""
    return max(int(sync_interval_ms), MINIMUM_SYNC_INTERVAL_MS) / 1000.0


def is_sync_conflict(error: Optional[BaseException]) -> bool:
    """Report whether a sync failure only means another job owns the codebase."""
    if error is None:
        return False
    message = str(error)
    return any(marker in message for marker in _CONFLICT_MARKERS)


def synthetic_job_id(prefix: str, codebase_id: str, when: Optional[datetime] = None) -> str:
    """Build the id a background sync or watcher converge runs under."""
    moment = clock.now() if when is None else when
    return f"{prefix}-{codebase_id}-{math.floor(moment.timestamp())}"


class ConvergeSlots:
    """Per-codebase guard so two converges of one codebase never overlap."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running: set[str] = set()

    def begin(self, codebase_id: str) -> bool:
        """Claim the slot; False when a converge for the codebase already runs."""
        with self._lock:
            if codebase_id in self._running:
                return False
            self._running.add(codebase_id)
            return True

    def end(self, codebase_id: str) -> None:
        """Release the slot claimed by :meth:`begin`."""
        with self._lock:
            self._running.discard(codebase_id)


class TriggerWatcher:
    """Detect touches of the ``.sync-trigger`` file under the context root."""

    def __init__(self, context_root: Union[str, "os.PathLike[str]"]) -> None:
        root = Path(context_root)
        root.mkdir(parents=True, exist_ok=True)
        self.trigger_path = root / TRIGGER_FILE_NAME
        self._last_trigger: Optional[float] = None
        try:
            self._last_trigger = self.trigger_path.stat().st_mtime
        except OSError:
            pass

    def poll(self) -> bool:
        """Return True when the trigger file's mtime moved past the last seen one."""
        try:
            modified = self.trigger_path.stat().st_mtime
        except FileNotFoundError:
            return False
        except OSError as error:
            logger.error("stat sync trigger failed: path=%s err=%s", self.trigger_path, error)
            return False
        if self._last_trigger is not None and modified <= self._last_trigger:
            return False
        self._last_trigger = modified
        return True