"""Zip assemblers: write named entries into a ZIP container.

Every chunk written to an entry is also fed to a hash assembler, so that the
content of each entry is hashed while it is streamed into the container and
never needs to be held in memory as a whole.
"""

import logging
import warnings
import zipfile
from abc import ABC, abstractmethod
from typing import BinaryIO

from schemas.hashing import EncodedHash
from sip_assembler.exceptions import ZipEntryTooLargeError, ZipStateError

from .hashing import HashAssembler

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# Earliest timestamp a ZIP entry can carry
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class ZipAssembler(ABC):
    """Abstract base class for zip assemblers.

    A zip assembler moves one way through unopened -> open -> closed and
    can't be reopened.
    """

    @abstractmethod
    def begin(self, sink: BinaryIO) -> None:
        """Start writing a container to the sink."""
        pass

    @abstractmethod
    def add_entry(
        self, name: str, stream: BinaryIO, hash_assembler: HashAssembler
    ) -> list[EncodedHash]:
        """Drain a stream into a new named entry.

        Args:
            name: Entry name within the container
            stream: Binary stream with the entry content
            hash_assembler: Observes every chunk of the content

        Returns:
            The hashes computed by the hash assembler
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Finish the container and close the sink."""
        pass

    @abstractmethod
    def abort(self) -> None:
        """Abandon the container after a failure and close the sink.

        The container left in the sink must not be used. Unlike close(), this
        may be called in any state, including after a failed add_entry().
        """
        pass


class DefaultZipAssembler(ZipAssembler):
    """Zip assembler built on the standard zipfile module.

    Entry timestamps are fixed (``date_time``), so that identical input
    always produces a byte-identical container.

    Attributes:
        compression: zipfile compression method for all entries
        date_time: Timestamp recorded for all entries
        force_zip64: Write ZIP64 headers for every entry. Entry sizes aren't
                     known in advance, so without them no entry can grow
                     past 2 GiB
    """

    def __init__(
        self,
        compression: int = zipfile.ZIP_DEFLATED,
        date_time: tuple[int, int, int, int, int, int] = ZIP_EPOCH,
        force_zip64: bool = True,
    ):
        self.compression = compression
        self.date_time = date_time
        self.force_zip64 = force_zip64
        self._sink: BinaryIO | None = None
        self._zip: zipfile.ZipFile | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._zip is not None

    def begin(self, sink: BinaryIO) -> None:
        if self._closed:
            raise ZipStateError("Zip assembler is closed and can't be reopened")
        if self._zip is not None:
            raise ZipStateError("Zip assembler has already begun")
        self._zip = zipfile.ZipFile(sink, mode="w", compression=self.compression)
        self._sink = sink

    def add_entry(
        self, name: str, stream: BinaryIO, hash_assembler: HashAssembler
    ) -> list[EncodedHash]:
        zf = self._require_open()
        if name in zf.NameToInfo:
            logger.warning(f"Writing duplicate zip entry: {name}")

        info = zipfile.ZipInfo(name, date_time=self.date_time)
        info.compress_type = self.compression
        info.external_attr = 0o644 << 16

        hash_assembler.initialize()
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings(
                    "ignore", message="Duplicate name", category=UserWarning
                )
                with zf.open(info, mode="w", force_zip64=self.force_zip64) as entry:
                    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
                        hash_assembler.add(chunk)
                        entry.write(chunk)
        except RuntimeError as e:
            # zipfile's way of saying an entry outgrew its non-ZIP64 header
            if "too large" not in str(e):
                raise
            raise ZipEntryTooLargeError(f"Zip entry {name} is too large: {e}") from e

        logger.debug(f"Added zip entry {name} ({hash_assembler.num_bytes_hashed} bytes)")
        return hash_assembler.get()

    def close(self) -> None:
        zf = self._require_open()
        try:
            zf.close()
        finally:
            self._release()

    def abort(self) -> None:
        if self._zip is None:
            self._closed = True
            return
        zf = self._zip
        try:
            zf.close()
        except (OSError, ValueError) as e:
            logger.warning(f"Abandoned zip container could not be finalized: {e}")
        finally:
            self._release()

    def _release(self) -> None:
        """Close the sink and move to the closed state."""
        sink = self._sink
        self._zip = None
        self._sink = None
        self._closed = True
        if sink is not None:
            sink.close()

    def _require_open(self) -> zipfile.ZipFile:
        if self._closed:
            raise ZipStateError("Zip assembler is closed")
        if self._zip is None:
            raise ZipStateError("Zip assembler has not begun")
        return self._zip
