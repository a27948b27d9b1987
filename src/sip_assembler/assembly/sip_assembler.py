"""SIP Assembler: builds a Submission Information Package from domain objects.

A SIP is a ZIP container holding:

- eas_sip.xml: the Packaging Information that describes the SIP
- eas_pdi.xml: the Preservation Description Information (PDI) with the
  structured data of all domain objects
- zero or more Content Data Objects (digital objects) with unstructured
  data, referenced from the PDI

Usage:
    assembler = SipAssembler.for_pdi_and_content(
        prototype, MyPdiAssembler(), extract_attachments,
        pdi_hash_assembler=DefaultHashAssembler(),
    )
    output = FileBuffer("out/sip.zip")
    assembler.start(output)
    for record in records:
        assembler.add(record)
    assembler.end()

The PDI is written to a data buffer until it is complete. A MemoryBuffer
suits small PDIs; use a file buffer supplier for large ones.
"""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from schemas.contents import HashedContents
from schemas.hashing import EncodedHash
from schemas.packaging_information import PackagingInformation
from sip_assembler.exceptions import AssemblyStateError, RuntimeIoError
from sip_assembler.streams.buffers import DataBuffer, DataBufferSupplier, MemoryBuffer
from sip_assembler.streams.hashing import HashAssembler, NoHashAssembler
from sip_assembler.streams.zip_assembler import DefaultZipAssembler, ZipAssembler

from .assembler import Assembler
from .extraction import DigitalObjectsExtraction, no_digital_objects
from .metrics import Counters, SipMetric, SipMetrics
from .packaging_information import (
    DefaultPackagingInformationFactory,
    PackagingInformationAssembler,
    PackagingInformationFactory,
)

logger = logging.getLogger(__name__)

D = TypeVar("D")

PACKAGING_INFORMATION_ENTRY = "eas_sip.xml"
PDI_ENTRY = "eas_pdi.xml"


class SipAssembler(Assembler[D]):
    """Assemble a SIP from domain objects of the same type.

    Call start() once, add() for each domain object, then end(). The
    assembler is not thread-safe, except for get_metrics(), which may be
    called from any thread at any time.

    If any step fails with RuntimeIoError, the SIP is incomplete and must be
    discarded. The output sink is closed and the PDI buffer released, so
    add() and end() raise AssemblyStateError until the next start().

    Attributes:
        packaging_information_factory: Creates the Packaging Information
    """

    def __init__(
        self,
        packaging_information_factory: PackagingInformationFactory,
        pdi_assembler: Assembler[HashedContents[D]],
        pdi_hash_assembler: HashAssembler | None = None,
        pdi_buffer_supplier: DataBufferSupplier = MemoryBuffer,
        contents_extraction: DigitalObjectsExtraction = no_digital_objects,
        content_hash_assembler: HashAssembler | None = None,
        packaging_information_assembler: Assembler[PackagingInformation] | None = None,
        zip_assembler_factory: Callable[[], ZipAssembler] = DefaultZipAssembler,
    ):
        """Initialize the SIP assembler.

        Args:
            packaging_information_factory: Creates the Packaging Information
            pdi_assembler: Builds up the PDI
            pdi_hash_assembler: Hashes the PDI (default: no hashing)
            pdi_buffer_supplier: Supplies a fresh buffer for each PDI
            contents_extraction: Extracts digital objects from domain objects
            content_hash_assembler: Hashes the digital objects (default: no hashing)
            packaging_information_assembler: Writes the Packaging Information
            zip_assembler_factory: Creates the zip assembler for each SIP
        """
        self.packaging_information_factory = packaging_information_factory
        self._pdi_assembler = pdi_assembler
        self._pdi_hash_assembler = pdi_hash_assembler or NoHashAssembler()
        self._pdi_buffer_supplier = pdi_buffer_supplier
        self._contents_extraction = contents_extraction
        self._content_hash_assembler = content_hash_assembler or NoHashAssembler()
        self._packaging_information_assembler = (
            packaging_information_assembler or PackagingInformationAssembler()
        )
        self._zip_assembler_factory = zip_assembler_factory
        self._zip: ZipAssembler | None = None
        self._metrics = Counters()
        self._pdi_buffer: DataBuffer | None = None
        self._pdi_hash: EncodedHash | None = None
        self._start_time = 0.0

    @classmethod
    def for_pdi(
        cls,
        packaging_information: PackagingInformation | PackagingInformationFactory,
        pdi_assembler: Assembler[HashedContents[D]],
        pdi_hash_assembler: HashAssembler | None = None,
        **kwargs,
    ) -> "SipAssembler[D]":
        """Assemble a SIP that contains only structured data.

        Args:
            packaging_information: Prototype or factory for the Packaging Information
            pdi_assembler: Builds up the PDI
            pdi_hash_assembler: Hashes the PDI (default: no hashing)
            **kwargs: Further SipAssembler arguments (e.g., pdi_buffer_supplier)

        Returns:
            The new SIP assembler
        """
        return cls(
            _as_factory(packaging_information),
            pdi_assembler,
            pdi_hash_assembler=pdi_hash_assembler,
            **kwargs,
        )

    @classmethod
    def for_pdi_and_content(
        cls,
        packaging_information: PackagingInformation | PackagingInformationFactory,
        pdi_assembler: Assembler[HashedContents[D]],
        contents_extraction: DigitalObjectsExtraction,
        pdi_hash_assembler: HashAssembler | None = None,
        content_hash_assembler: HashAssembler | None = None,
        **kwargs,
    ) -> "SipAssembler[D]":
        """Assemble a SIP that contains structured and unstructured data.

        Args:
            packaging_information: Prototype or factory for the Packaging Information
            pdi_assembler: Builds up the PDI
            contents_extraction: Extracts digital objects from domain objects
            pdi_hash_assembler: Hashes the PDI (default: no hashing)
            content_hash_assembler: Hashes the digital objects (default: no hashing)
            **kwargs: Further SipAssembler arguments (e.g., pdi_buffer_supplier)

        Returns:
            The new SIP assembler
        """
        return cls(
            _as_factory(packaging_information),
            pdi_assembler,
            pdi_hash_assembler=pdi_hash_assembler,
            contents_extraction=contents_extraction,
            content_hash_assembler=content_hash_assembler,
            **kwargs,
        )

    def start(self, buffer: DataBuffer) -> None:
        """Start assembling a SIP into the buffer.

        Raises:
            RuntimeIoError: If the buffer or the PDI can't be opened for writing
        """
        self._pdi_hash = None
        self._metrics.reset()
        self._start_time = time.monotonic()
        self._zip = self._zip_assembler_factory()
        try:
            self._zip.begin(buffer.open_for_writing())
            self._start_pdi()
        except OSError as e:
            self._abort()
            raise RuntimeIoError(f"Could not start SIP: {e}") from e
        logger.info(f"Started SIP assembly into {buffer!r}")

    def _start_pdi(self) -> None:
        self._pdi_buffer = self._pdi_buffer_supplier()
        self._pdi_assembler.start(self._pdi_buffer)

    def add(self, domain_object: D) -> None:
        """Add a domain object and its digital objects to the SIP.

        Raises:
            RuntimeIoError: If extracting, writing, or hashing content fails,
                            or the PDI assembler fails
        """
        pdi_buffer = self._require_pdi_buffer()
        try:
            content_hashes = self._add_contents_of(domain_object)
            self._pdi_assembler.add(HashedContents(domain_object, content_hashes))
        except OSError as e:
            self._abort()
            raise RuntimeIoError(f"Could not add domain object to SIP: {e}") from e
        self._metrics.inc(SipMetric.NUM_AIUS)
        # Approximate until end(), when the PDI is complete
        self._set_pdi_size(pdi_buffer.length())

    def _add_contents_of(self, domain_object: D) -> dict[str, list[EncodedHash]]:
        """Write the digital objects of a domain object to the SIP.

        Returns:
            Reference information -> hashes of each digital object
        """
        assert self._zip is not None
        result: dict[str, list[EncodedHash]] = {}
        for digital_object in self._contents_extraction(domain_object):
            self._metrics.inc(SipMetric.NUM_DIGITAL_OBJECTS)
            entry = digital_object.reference_information
            with digital_object.open() as stream:
                hashes = self._zip.add_entry(entry, stream, self._content_hash_assembler)
            result[entry] = hashes
            self._metrics.inc(
                SipMetric.SIZE_DIGITAL_OBJECTS,
                self._content_hash_assembler.num_bytes_hashed,
            )
        return dict(sorted(result.items()))

    def _set_pdi_size(self, pdi_size: int) -> None:
        size_sip = self._metrics.get(SipMetric.SIZE_DIGITAL_OBJECTS) + pdi_size
        self._metrics.set_all(
            {SipMetric.SIZE_PDI: pdi_size, SipMetric.SIZE_SIP: size_sip}
        )

    def end(self) -> None:
        """Finish the PDI, add the Packaging Information, and close the SIP.

        Raises:
            RuntimeIoError: If the PDI or Packaging Information can't be written
        """
        self._require_pdi_buffer()
        assert self._zip is not None
        try:
            self._end_pdi()
            self._add_packaging_information()
            self._zip.close()
        except OSError as e:
            self._abort()
            raise RuntimeIoError(f"Could not finish SIP: {e}") from e
        elapsed_ms = int((time.monotonic() - self._start_time) * 1000)
        self._metrics.set(SipMetric.ASSEMBLY_TIME, elapsed_ms)

        metrics = self.get_metrics()
        logger.info(
            f"Finished SIP with {metrics.num_aius} AIUs and "
            f"{metrics.num_digital_objects} digital objects "
            f"({metrics.size_sip} bytes) in {elapsed_ms} ms"
        )

    def _end_pdi(self) -> None:
        try:
            self._pdi_assembler.end()
            self._add_pdi_to_zip()
        finally:
            self._discard_pdi_buffer()

    def _discard_pdi_buffer(self) -> None:
        if self._pdi_buffer is not None:
            self._pdi_buffer.discard()
            self._pdi_buffer = None

    def _abort(self) -> None:
        """Abandon the SIP after an I/O failure and release its resources."""
        try:
            self._discard_pdi_buffer()
        finally:
            if self._zip is not None:
                self._zip.abort()
        logger.warning("SIP assembly aborted; the SIP must be discarded")

    def _add_pdi_to_zip(self) -> None:
        assert self._zip is not None and self._pdi_buffer is not None
        with self._pdi_buffer.open_for_reading() as stream:
            hashes = self._zip.add_entry(PDI_ENTRY, stream, self._pdi_hash_assembler)
        # Only the first hash is recorded in the Packaging Information
        self._pdi_hash = hashes[0] if hashes else None
        self._set_pdi_size(self._pdi_hash_assembler.num_bytes_hashed)

    def _add_packaging_information(self) -> None:
        assert self._zip is not None
        buffer = MemoryBuffer()
        self._packaging_information_assembler.start(buffer)
        self._packaging_information_assembler.add(self._packaging_information())
        self._packaging_information_assembler.end()
        with buffer.open_for_reading() as stream:
            self._zip.add_entry(PACKAGING_INFORMATION_ENTRY, stream, NoHashAssembler())

    def _packaging_information(self) -> PackagingInformation:
        return self.packaging_information_factory.new_instance(
            self._metrics.get(SipMetric.NUM_AIUS), self._pdi_hash
        )

    def _require_pdi_buffer(self) -> DataBuffer:
        if self._pdi_buffer is None:
            raise AssemblyStateError(
                "SIP assembly is not in progress; call start() before add() or end()"
            )
        return self._pdi_buffer

    def get_metrics(self) -> SipMetrics:
        """Return a snapshot of the assembly metrics."""
        return SipMetrics(self._metrics.for_reading())

    @property
    def pdi_hash(self) -> EncodedHash | None:
        """Hash of the PDI of the last finished SIP, if the PDI was hashed."""
        return self._pdi_hash


def _as_factory(
    packaging_information: PackagingInformation | PackagingInformationFactory,
) -> PackagingInformationFactory:
    if isinstance(packaging_information, PackagingInformationFactory):
        return packaging_information
    return DefaultPackagingInformationFactory(packaging_information)
