"""Assembly of SIPs from domain objects."""

from .assembler import Assembler
from .extraction import DigitalObject, DigitalObjectsExtraction, no_digital_objects
from .files import FilesPdiAssembler, collect_source_files, extract_source_file
from .generator import GenerationResult, Generator
from .metrics import Counters, SipMetric, SipMetrics
from .packaging_information import (
    DefaultPackagingInformationFactory,
    PackagingInformationAssembler,
    PackagingInformationFactory,
)
from .pdi_assembler import XmlPdiAssembler
from .sip_assembler import PACKAGING_INFORMATION_ENTRY, PDI_ENTRY, SipAssembler

__all__ = [
    "Assembler",
    "Counters",
    "DefaultPackagingInformationFactory",
    "DigitalObject",
    "DigitalObjectsExtraction",
    "FilesPdiAssembler",
    "GenerationResult",
    "Generator",
    "PACKAGING_INFORMATION_ENTRY",
    "PDI_ENTRY",
    "PackagingInformationAssembler",
    "PackagingInformationFactory",
    "SipAssembler",
    "SipMetric",
    "SipMetrics",
    "XmlPdiAssembler",
    "collect_source_files",
    "extract_source_file",
    "no_digital_objects",
]
