"""Data buffers: somewhere to stream bytes to, then read them back.

A buffer is written once and may then be read any number of times:

    buffer = MemoryBuffer()
    with buffer.open_for_writing() as out:
        out.write(b"...")
    with buffer.open_for_reading() as stream:
        data = stream.read()

Memory buffers are best for small content. File buffers hold arbitrarily
large content at the cost of disk I/O. Which one is used never changes the
bytes that are written.
"""

import io
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from sip_assembler.exceptions import BufferStateError

logger = logging.getLogger(__name__)

DataBufferSupplier = Callable[[], "DataBuffer"]


class DataBuffer(ABC):
    """Abstract base class for write-once, read-many byte buffers."""

    @abstractmethod
    def open_for_writing(self) -> BinaryIO:
        """Open the buffer for writing.

        Returns:
            A binary stream; the buffer content is complete once it is closed

        Raises:
            BufferStateError: If the buffer was already opened for writing
            OSError: If the backing storage cannot be opened
        """
        pass

    @abstractmethod
    def open_for_reading(self) -> BinaryIO:
        """Open the buffer for reading.

        Returns:
            A binary stream positioned at the start of the content

        Raises:
            BufferStateError: If writing has not been completed
            OSError: If the backing storage cannot be opened
        """
        pass

    @abstractmethod
    def length(self) -> int:
        """Number of bytes written so far."""
        pass

    def discard(self) -> None:
        """Release the backing storage. The buffer can't be read afterwards."""
        pass


class _CapturingBytesIO(io.BytesIO):
    """BytesIO that hands its content to a callback when closed."""

    def __init__(self, on_close: Callable[[bytes], None]):
        super().__init__()
        self._on_close = on_close

    def close(self) -> None:
        if not self.closed:
            self._on_close(self.getvalue())
        super().close()


class MemoryBuffer(DataBuffer):
    """Data buffer that holds its content in process memory."""

    def __init__(self) -> None:
        self._writer: _CapturingBytesIO | None = None
        self._data: bytes | None = None
        self._discarded = False

    def __repr__(self) -> str:
        return f"MemoryBuffer({self.length()} bytes)"

    def open_for_writing(self) -> BinaryIO:
        if self._writer is not None or self._discarded:
            raise BufferStateError("MemoryBuffer can only be opened for writing once")
        self._writer = _CapturingBytesIO(self._capture)
        return self._writer

    def _capture(self, data: bytes) -> None:
        self._data = data

    def open_for_reading(self) -> BinaryIO:
        if self._data is None:
            raise BufferStateError("MemoryBuffer has not been completely written")
        return io.BytesIO(self._data)

    def length(self) -> int:
        if self._data is not None:
            return len(self._data)
        if self._writer is not None and not self._writer.closed:
            with self._writer.getbuffer() as view:
                return view.nbytes
        return 0

    def discard(self) -> None:
        self._data = None
        self._writer = None
        self._discarded = True

    def to_bytes(self) -> bytes:
        """Return the complete content of the buffer."""
        with self.open_for_reading() as stream:
            return stream.read()


class FileBuffer(DataBuffer):
    """Data buffer backed by a file.

    Attributes:
        path: File holding the content. When no path is given, a temporary
              file is created.
    """

    def __init__(self, path: Path | str | None = None):
        if path is None:
            fd, name = tempfile.mkstemp(prefix="sip-", suffix=".buffer")
            os.close(fd)
            path = name
        self.path = Path(path)
        self._writer: BinaryIO | None = None
        self._discarded = False

    def __repr__(self) -> str:
        return f"FileBuffer('{self.path}')"

    def open_for_writing(self) -> BinaryIO:
        if self._writer is not None or self._discarded:
            raise BufferStateError(f"{self.path} can only be opened for writing once")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._writer = self.path.open("wb")
        return self._writer

    def open_for_reading(self) -> BinaryIO:
        if self._writer is None or not self._writer.closed or self._discarded:
            raise BufferStateError(f"{self.path} has not been completely written")
        return self.path.open("rb")

    def length(self) -> int:
        if self._writer is None or self._discarded:
            return 0
        if not self._writer.closed:
            return self._writer.tell()
        return self.path.stat().st_size

    def discard(self) -> None:
        if self._writer is not None and not self._writer.closed:
            self._writer.close()
        self.path.unlink(missing_ok=True)
        self._discarded = True
        logger.debug(f"Discarded file buffer {self.path}")


def file_buffer_supplier(files: Callable[[], Path]) -> DataBufferSupplier:
    """Adapt a file supplier into a supplier of file buffers.

    Args:
        files: Callable returning the path for each new buffer

    Returns:
        Callable returning a fresh FileBuffer per call
    """
    return lambda: FileBuffer(files())
