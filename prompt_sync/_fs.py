"""Atomic file replacement."""

import os
import tempfile
from pathlib import Path


def atomic_write_text(path: Path, data: str, *, encoding: str = "utf-8") -> None:
    """Write ``data`` to ``path`` via a sibling temp file and ``os.replace``.

    Readers see either the old file or the complete new one. The temp file is
    removed on every exit path; OSError from the write or rename propagates.
    """
    target = Path(path)
    temp_file = tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        newline="",
        dir=str(target.parent),
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_name = temp_file.name
    try:
        with temp_file:
            temp_file.write(data)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_name, target)
    finally:
        if os.path.exists(temp_name):
            try:
                os.remove(temp_name)
            except OSError:
                pass
