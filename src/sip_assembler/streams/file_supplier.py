"""Ways of supplying file paths for file-backed data buffers."""

import itertools
import tempfile
import uuid
from collections.abc import Callable
from pathlib import Path

FileSupplier = Callable[[], Path]


def from_temporary_directory() -> FileSupplier:
    """Supply randomly named files in a newly created temporary directory."""
    return from_directory(Path(tempfile.mkdtemp(prefix="sip-")))


def from_directory(directory: Path) -> FileSupplier:
    """Supply randomly named files in the given directory."""
    return lambda: directory / str(uuid.uuid4())


def sequential(directory: Path, prefix: str = "", suffix: str = "") -> FileSupplier:
    """Supply sequentially named files in the given directory.

    Example:
        files = sequential(Path("/tmp/pdis"), "pdi-", ".xml")
        files()  # /tmp/pdis/pdi-1.xml
        files()  # /tmp/pdis/pdi-2.xml
    """
    counter = itertools.count(1)
    return lambda: directory / f"{prefix}{next(counter)}{suffix}"
