"""
Module: persistence.file_locking

Purpose:
    Cross-platform locked JSON access for the print-config store. Two
    editors of the same project (or an editor and the export launcher)
    may touch the same file; every write is a locked read-modify-write
    so neither loses the other's report periods.

Key Functions:
    - locked_read_json: Read JSON under a shared lock
    - locked_read_modify_write_json: Read-modify-write JSON under an exclusive lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - persistence.autosave: JsonFileBackend
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import portalocker

logger = logging.getLogger(__name__)

# Seconds to wait for another process to release the file
LOCK_TIMEOUT = 5.0


def locked_read_json(path: Path, timeout: float = LOCK_TIMEOUT) -> Optional[Dict[str, Any]]:
    """
    Read a JSON file while holding a shared lock.

    Args:
        path: Path to JSON file.
        timeout: Seconds to wait for the lock.

    Returns:
        Decoded object, or None if the file does not exist or is empty.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON.
        portalocker.LockException: If the lock could not be acquired in time.
    """
    if not path.exists():
        return None

    with portalocker.Lock(
        str(path),
        mode="r",
        timeout=timeout,
        flags=portalocker.LOCK_SH | portalocker.LOCK_NB,
        encoding="utf-8",
    ) as f:
        content = f.read()

    if not content.strip():
        return None
    return json.loads(content)


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
    timeout: float = LOCK_TIMEOUT,
) -> Dict[str, Any]:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.

    A file that is not valid JSON is copied aside (``*.corrupt``) and
    replaced by ``default()`` before the modifier runs.

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for default data if file doesn't exist.
        timeout: Seconds to wait for the lock.

    Returns:
        The modified data that was written.

    Example:
        >>> def put_period(existing):
        ...     existing.setdefault("records", {})["2024-06-07"] = record
        ...     return existing
        >>> locked_read_modify_write_json(store_path, put_period)
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.touch()

    with portalocker.Lock(
        str(path),
        mode="r+",
        timeout=timeout,
        flags=portalocker.LOCK_EX | portalocker.LOCK_NB,
        encoding="utf-8",
    ) as f:
        f.seek(0)
        content = f.read()
        existing = default()
        if content.strip():
            try:
                existing = json.loads(content)
            except json.JSONDecodeError as e:
                backup = path.with_name(path.name + ".corrupt")
                shutil.copyfile(path, backup)
                logger.warning(f"Corrupt store {path.name} moved to {backup.name}: {e}")

        modified = modifier(existing)

        f.seek(0)
        f.truncate()
        json.dump(modified, f, indent=2, ensure_ascii=False)
        f.flush()

    logger.debug(f"Wrote {path.name}")
    return modified
