"""
Module: persistence.autosave

Purpose:
    Persistence adapter for the Config Store. The in-memory store is
    updated immediately; the durable save lags behind by a debounce
    delay, skips snapshots identical to the last save, and retries
    failed saves with exponential backoff without blocking edits.
    Unsaved edits are never discarded: a snapshot that failed to save
    stays pending until a later save succeeds.

Key Classes:
    - ConfigBackend: Storage interface keyed by (project_id, report_period)
    - JsonFileBackend: Locked JSON files, one per project
    - AutoSaver: Debounced saver with status reporting
    - SaveStatus: idle | saving | saved | error

Key Functions:
    - load_print_config(): Load a stored configuration or the defaults

Dependencies:
    - persistence.file_locking: portalocker-backed JSON access
    - core.utils.serialization: Versioned records

Used By:
    - controller: Studio session
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import portalocker

from print_studio.core.utils.serialization import (
    load_print_config_or_default,
    serialize_print_config,
)
from print_studio.studio.print_config import PrintConfig

from .file_locking import locked_read_json, locked_read_modify_write_json

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 0.5

STORE_SUFFIX = ".print.json"


class SaveError(Exception):
    """Raised by a backend when a record cannot be stored."""


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


# ─────────────────────────────────────────────────────────────────────────────
# Backends
# ─────────────────────────────────────────────────────────────────────────────

class ConfigBackend(ABC):
    """Durable storage of print configuration records."""

    @abstractmethod
    def load(self, project_id: str, report_period: str) -> Optional[Dict[str, Any]]:
        """Return the stored record, or None if there is none."""

    @abstractmethod
    def save(self, project_id: str, report_period: str, record: Dict[str, Any]) -> None:
        """Store a record. Raises SaveError on failure."""


class JsonFileBackend(ConfigBackend):
    """
    One JSON file per project holding every report period's record.

    File layout::

        {"records": {"<report_period>": {<print config record>}, ...}}

    Example:
        >>> backend = JsonFileBackend(Path("~/.print_studio").expanduser())
        >>> backend.save("p-42", "2024-06-07", record)
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, project_id: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9._-]", "_", project_id) or "_"
        return self.root / f"{safe}{STORE_SUFFIX}"

    def load(self, project_id: str, report_period: str) -> Optional[Dict[str, Any]]:
        data = locked_read_json(self.path_for(project_id))
        if not isinstance(data, dict):
            return None
        records = data.get("records", {})
        if not isinstance(records, dict):
            return None
        return records.get(report_period)

    def save(self, project_id: str, report_period: str, record: Dict[str, Any]) -> None:
        def put_record(existing: Dict[str, Any]) -> Dict[str, Any]:
            if not isinstance(existing.get("records"), dict):
                existing["records"] = {}
            existing["records"][report_period] = record
            return existing

        try:
            locked_read_modify_write_json(self.path_for(project_id), put_record)
        except (OSError, portalocker.LockException) as e:
            raise SaveError(f"Could not save print config for {project_id}/{report_period}: {e}") from e


def load_print_config(backend: ConfigBackend, project_id: str, report_period: str) -> PrintConfig:
    """
    Load the stored configuration, falling back to defaults.

    Neither a missing record, a malformed record nor an unreadable store
    prevents the report from loading.
    """
    try:
        record = backend.load(project_id, report_period)
    except (OSError, ValueError, portalocker.LockException) as e:
        logger.warning(f"Could not read print config for {project_id}/{report_period}: {e}")
        record = None
    return load_print_config_or_default(record)


# ─────────────────────────────────────────────────────────────────────────────
# Auto-saver
# ─────────────────────────────────────────────────────────────────────────────

StatusCallback = Callable[[SaveStatus], None]


class AutoSaver:
    """
    Debounced, retrying saver for PrintConfig snapshots.

    ``schedule()`` is called after every edit; only the last snapshot in
    a burst of edits is written, ``delay`` seconds after the burst ends.

    Example:
        >>> saver = AutoSaver(backend, "p-42", "2024-06-07", initial=config)
        >>> store.subscribe(saver.schedule)
        >>> ...
        >>> saver.close()   # flush pending edits
    """

    def __init__(
        self,
        backend: ConfigBackend,
        project_id: str,
        report_period: str,
        *,
        initial: Optional[PrintConfig] = None,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff: float = DEFAULT_BACKOFF_SECONDS,
        on_status: Optional[StatusCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if delay < 0:
            raise ValueError(f"delay must be non-negative: {delay}")
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative: {max_retries}")

        self.backend = backend
        self.project_id = project_id
        self.report_period = report_period
        self.delay = delay
        self.max_retries = max_retries
        self.backoff = backoff
        self._on_status = on_status
        self._sleep = sleep

        self._lock = threading.Lock()
        self._save_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[PrintConfig] = None
        self._last_saved: Optional[str] = self._fingerprint(initial) if initial is not None else None
        self._status = SaveStatus.IDLE
        self.last_error: Optional[str] = None

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, config: PrintConfig) -> None:
        """Queue a snapshot for saving after the debounce delay."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._fingerprint(config) == self._last_saved:
                # Edits were undone back to the saved state
                self._pending = None
                return
            self._pending = config
            self._timer = threading.Timer(self.delay, self._on_timer)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """
        Save any pending snapshot now, on the calling thread.

        Returns:
            True if nothing was pending or the save succeeded
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            config = self._pending
        if config is None:
            return True
        return self._save(config)

    def close(self) -> bool:
        """Cancel the timer and flush pending edits."""
        return self.flush()

    def _on_timer(self) -> None:
        with self._lock:
            self._timer = None
            config = self._pending
        if config is not None:
            self._save(config)

    def _save(self, config: PrintConfig) -> bool:
        record = serialize_print_config(config, self.project_id, self.report_period)
        fingerprint = _dump(record)

        with self._save_lock:
            if fingerprint == self._last_saved:
                self._clear_pending(config)
                return True

            self._set_status(SaveStatus.SAVING)
            for attempt in range(self.max_retries + 1):
                try:
                    self.backend.save(self.project_id, self.report_period, record)
                except SaveError as e:
                    self.last_error = str(e)
                    if attempt < self.max_retries:
                        wait = self.backoff * (2 ** attempt)
                        logger.warning(
                            f"Save failed (attempt {attempt + 1}/{self.max_retries + 1}), "
                            f"retrying in {wait:.2f}s: {e}"
                        )
                        self._sleep(wait)
                    continue

                self._last_saved = fingerprint
                self.last_error = None
                self._clear_pending(config)
                self._set_status(SaveStatus.SAVED)
                logger.debug(f"Saved print config for {self.project_id}/{self.report_period}")
                return True

        logger.error(
            f"Could not save print config for {self.project_id}/{self.report_period} "
            f"after {self.max_retries + 1} attempts: {self.last_error}"
        )
        self._set_status(SaveStatus.ERROR)
        return False

    def _clear_pending(self, config: PrintConfig) -> None:
        with self._lock:
            # A newer snapshot scheduled during the save stays pending
            if self._pending is config:
                self._pending = None

    def _set_status(self, status: SaveStatus) -> None:
        self._status = status
        if self._on_status is not None:
            try:
                self._on_status(status)
            except Exception as e:
                logger.warning(f"Save status listener failed: {e}")

    def _fingerprint(self, config: PrintConfig) -> str:
        return _dump(serialize_print_config(config, self.project_id, self.report_period))


def _dump(record: Dict[str, Any]) -> str:
    return json.dumps(record, sort_keys=True)
