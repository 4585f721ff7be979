"""
Local JSON snapshot helpers for the chunk store and space registry.
Snapshots are written to a temp file in the same directory and swapped in
with os.replace, so readers never see a half-written file.
"""

import os
import json
import tempfile
from pathlib import Path
from typing import Any, Optional
from spacerag.core.logger import logger


def save_snapshot(path: str, payload: Any) -> None:
    """
    Atomically write `payload` as JSON to `path`.

    Args:
        path: Destination file
        payload: JSON-serialisable data
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(payload, f)
        os.replace(tmp_path, target)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def load_snapshot(path: str) -> Optional[Any]:
    """
    Read a JSON snapshot.

    Returns:
        Decoded payload, or None if the file does not exist
    """
    if not os.path.exists(path):
        return None

    with open(path, "r") as f:
        payload = json.load(f)
    logger.info(f"Loaded snapshot {path}")
    return payload
