"""Reading and writing whole binary files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

__all__ = ["FileError", "read_file", "write_file"]

PathLike = Union[str, "os.PathLike[str]"]


class FileError(Exception):
    """Raised when a file cannot be read or written."""


def read_file(filepath: PathLike) -> bytes:
    """Return the entire contents of ``filepath`` as bytes."""
    try:
        with open(filepath, "rb") as handle:
            return handle.read()
    except FileNotFoundError as exc:
        raise FileError(f"Error: Could not open file {filepath}") from exc
    except OSError as exc:
        raise FileError(f"Error: Could not open file {filepath}") from exc


def write_file(filepath: PathLike, data: bytes) -> None:
    """Write ``data`` to ``filepath``, replacing any existing contents."""
    try:
        Path(filepath).write_bytes(bytes(data))
    except OSError as exc:
        raise FileError(f"Error: Could not create file {filepath}") from exc