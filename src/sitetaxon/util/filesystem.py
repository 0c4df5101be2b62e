"""
Locked, atomically replaced JSON documents for the file-backed store.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from filelock import FileLock

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0


def lock_path_for(path: Path | str) -> Path:
    """``store.json`` is guarded by ``store.json.lock`` in the same directory."""
    target = Path(path)
    return target.with_name(f"{target.name}.lock")


@contextmanager
def file_lock(path: Path | str, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[Path]:
    """
    Hold the lock file next to ``path`` and yield the resolved target.

    Raises:
        filelock.Timeout: If another process keeps the lock past ``timeout``.
    """
    target = Path(path).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(str(lock_path_for(target)), timeout=timeout):
        yield target


def read_json_document(path: Path | str) -> Optional[Any]:
    """Parsed document, or None when the file is missing or blank."""
    target = Path(path).expanduser().resolve()
    try:
        raw = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    if not raw.strip():
        return None
    return json.loads(raw)


def write_json_document(path: Path | str, payload: Any) -> Path:
    """
    Replace ``path`` with ``payload`` serialized as indented JSON.

    The document is staged in a sibling temp file and swapped in with
    ``os.replace``, so readers see either the old or the new document. The
    caller holds :func:`file_lock` when other writers may be active.
    """
    target = Path(path).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    ) as handle:
        staging = Path(handle.name)
        try:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        except OSError:
            handle.close()
            staging.unlink(missing_ok=True)
            raise
    try:
        os.replace(staging, target)
    except OSError:
        staging.unlink(missing_ok=True)
        raise
    logger.debug("Wrote %d bytes to %s", len(text), target)
    return target
