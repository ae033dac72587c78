"""
File helpers for the local data directory.

Thread Safety:
    Uses atomic writes (write to temp file, then rename) to prevent data
    corruption from concurrent access. File renames are atomic on POSIX systems.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to a file, creating parent directories.

    Args:
        path: Target file path
        content: String content to write

    Raises:
        OSError: If write or rename fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    # Temp file in the same directory so the rename stays on one filesystem
    fd, temp_path = tempfile.mkstemp(
        suffix=".tmp", prefix=path.stem, dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """Atomically write a dictionary as indented JSON."""
    atomic_write(path, json.dumps(data, indent=2, default=str))
