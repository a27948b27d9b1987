"""Packaging Information: factories and the eas_sip.xml assembler."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from lxml import etree

from schemas.hashing import EncodedHash
from schemas.packaging_information import DataSubmissionSession, PackagingInformation
from sip_assembler.exceptions import AssemblyStateError
from sip_assembler.streams.buffers import DataBuffer

from .assembler import Assembler

logger = logging.getLogger(__name__)

SIP_NS = "urn:x-emc:ia:schema:sip:1.0"


class PackagingInformationFactory(ABC):
    """Abstract base class for Packaging Information factories.

    The SIP assembler asks the factory for the Packaging Information once the
    PDI is complete, when the number of AIUs and the PDI hash are known.
    """

    @abstractmethod
    def new_instance(
        self, aiu_count: int, pdi_hash: EncodedHash | None
    ) -> PackagingInformation:
        """Create the Packaging Information for a finished PDI.

        Args:
            aiu_count: Number of domain objects in the PDI
            pdi_hash: Hash of the PDI, or None if the PDI wasn't hashed

        Returns:
            Fully populated PackagingInformation
        """
        pass


class DefaultPackagingInformationFactory(PackagingInformationFactory):
    """Create Packaging Information from a prototype.

    Suitable when a SIP is the only one in its Data Submission Session. The
    prototype holds the application-specific fields and is never modified.

    Attributes:
        prototype: Template for every PackagingInformation produced
    """

    def __init__(self, prototype: PackagingInformation):
        self.prototype = prototype

    def new_instance(
        self, aiu_count: int, pdi_hash: EncodedHash | None
    ) -> PackagingInformation:
        return self.prototype.model_copy(
            update={"aiu_count": aiu_count, "pdi_hash": pdi_hash}, deep=True
        )


class PackagingInformationAssembler(Assembler[PackagingInformation]):
    """Write Packaging Information as an eas_sip.xml document.

    Exactly one PackagingInformation is added between start() and end().
    """

    def __init__(self) -> None:
        self._buffer: DataBuffer | None = None
        self._packaging_information: PackagingInformation | None = None

    def start(self, buffer: DataBuffer) -> None:
        self._buffer = buffer
        self._packaging_information = None

    def add(self, packaging_information: PackagingInformation) -> None:
        if self._buffer is None:
            raise AssemblyStateError("Packaging Information assembler has not been started")
        if self._packaging_information is not None:
            raise AssemblyStateError("SIP can only have one Packaging Information")
        self._packaging_information = packaging_information

    def end(self) -> None:
        if self._buffer is None or self._packaging_information is None:
            raise AssemblyStateError("No Packaging Information was added")
        root = self._build_sip(self._packaging_information)
        with self._buffer.open_for_writing() as stream:
            stream.write(
                etree.tostring(
                    root,
                    xml_declaration=True,
                    encoding="UTF-8",
                    pretty_print=True,
                )
            )
        self._buffer = None

    def _build_sip(self, info: PackagingInformation) -> etree._Element:
        """Build the sip root element."""
        root = etree.Element(f"{{{SIP_NS}}}sip", nsmap={None: SIP_NS})
        root.append(self._build_dss(info.dss))
        self._sub_element(root, "production_date", _format_date(info.production_date))
        self._sub_element(root, "seqno", str(info.seqno))
        self._sub_element(root, "is_last", str(info.is_last).lower())
        self._sub_element(root, "aiu_count", str(info.aiu_count))
        self._sub_element(root, "page_count", str(info.page_count))
        if info.pdi_hash is not None:
            hash_el = self._sub_element(root, "pdi_hash", info.pdi_hash.value)
            hash_el.set("algorithm", info.pdi_hash.algorithm)
            hash_el.set("encoding", info.pdi_hash.encoding)
        return root

    def _build_dss(self, dss: DataSubmissionSession) -> etree._Element:
        """Build the dss element."""
        dss_el = etree.Element(f"{{{SIP_NS}}}dss")
        self._sub_element(dss_el, "holding", dss.holding)
        self._sub_element(dss_el, "id", dss.id)
        self._sub_element(dss_el, "pdi_schema", dss.pdi_schema)
        self._sub_element(dss_el, "pdi_schema_version", dss.pdi_schema_version)
        self._sub_element(dss_el, "production_date", _format_date(dss.production_date))
        self._sub_element(
            dss_el, "base_retention_date", _format_date(dss.base_retention_date)
        )
        self._sub_element(dss_el, "producer", dss.producer)
        self._sub_element(dss_el, "entity", dss.entity)
        self._sub_element(dss_el, "priority", str(dss.priority))
        self._sub_element(dss_el, "application", dss.application)
        return dss_el

    def _sub_element(
        self, parent: etree._Element, name: str, text: str | None
    ) -> etree._Element | None:
        """Append an element, unless its value is unset."""
        if text is None:
            return None
        el = etree.SubElement(parent, f"{{{SIP_NS}}}{name}")
        el.text = text
        return el


def _format_date(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
