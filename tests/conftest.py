"""Pytest fixtures for SIP Assembler tests."""

import io
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest
from lxml import etree

from schemas.packaging_information import DataSubmissionSession, PackagingInformation
from sip_assembler.assembly import DigitalObject, SipAssembler, XmlPdiAssembler
from sip_assembler.streams import MemoryBuffer

RECORDS_NS = "urn:test:records"


@dataclass
class Record:
    """Domain object used throughout the tests."""

    id: str
    attachments: dict[str, bytes] = field(default_factory=dict)


class RecordPdiAssembler(XmlPdiAssembler[Record]):
    """Writes one <record> per domain object, with a <content> per attachment."""

    def __init__(self, schema=None):
        super().__init__(RECORDS_NS, "records", schema)

    def build_element(self, record, content_hashes):
        record_el = self.element("record")
        record_el.set("id", record.id)
        for reference, hashes in content_hashes.items():
            content_el = self.sub_element(record_el, "content")
            content_el.set("ref", reference)
            self.add_hashes(content_el, hashes)
        return record_el


def extract_attachments(record: Record) -> Iterator[DigitalObject]:
    for name, data in record.attachments.items():
        yield DigitalObject.from_bytes(name, data)


def records_tag(local: str) -> str:
    return f"{{{RECORDS_NS}}}{local}"


class ZeroStream(io.RawIOBase):
    """Readable stream of a given number of zero bytes, generated on demand."""

    def __init__(self, size: int):
        super().__init__()
        self.remaining = size

    def readable(self):
        return True

    def read(self, size=-1):
        n = self.remaining if size < 0 else min(size, self.remaining)
        self.remaining -= n
        return bytes(n)


class DiscardingSink(io.RawIOBase):
    """Seekable sink that keeps track of positions but drops the bytes."""

    def __init__(self):
        super().__init__()
        self.size = 0
        self._position = 0

    def writable(self):
        return True

    def seekable(self):
        return True

    def write(self, data):
        n = len(data)
        self._position += n
        self.size = max(self.size, self._position)
        return n

    def tell(self):
        return self._position

    def seek(self, offset, whence=io.SEEK_SET):
        if whence == io.SEEK_CUR:
            offset += self._position
        elif whence == io.SEEK_END:
            offset += self.size
        self._position = offset
        return self._position


@pytest.fixture
def prototype():
    """Packaging Information prototype with DSS fields set."""
    return PackagingInformation(
        dss=DataSubmissionSession(
            holding="PhoneCalls",
            id="dss-2026-01-15",
            pdi_schema="urn:test:records",
            pdi_schema_version="1.0",
            production_date=datetime(2026, 1, 15, tzinfo=timezone.utc),
            producer="Test",
            entity="PhoneCalls",
            application="PhoneCalls",
        ),
        production_date=datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def records():
    """Three records with zero, one and two attachments."""
    return [
        Record("r1"),
        Record("r2", {"r2/call.wav": b"RIFF" + b"\x00" * 96}),
        Record("r3", {"r3/b.txt": b"second", "r3/a.txt": b"first"}),
    ]


@pytest.fixture
def make_assembler(prototype):
    """Factory for SIP assemblers over Record domain objects."""

    def _make(**kwargs) -> SipAssembler:
        kwargs.setdefault("contents_extraction", extract_attachments)
        pdi_assembler = kwargs.pop("pdi_assembler", None) or RecordPdiAssembler()
        return SipAssembler.for_pdi_and_content(prototype, pdi_assembler, **kwargs)

    return _make


@pytest.fixture
def assemble():
    """Run an assembler over records into a MemoryBuffer and return the buffer."""

    def _assemble(assembler: SipAssembler, domain_objects) -> MemoryBuffer:
        buffer = MemoryBuffer()
        assembler.start(buffer)
        for domain_object in domain_objects:
            assembler.add(domain_object)
        assembler.end()
        return buffer

    return _assemble


@pytest.fixture
def zip_entries():
    """Read all entries of a finished SIP as (name, content) pairs in order."""

    def _entries(buffer: MemoryBuffer) -> list[tuple[str, bytes]]:
        with zipfile.ZipFile(io.BytesIO(buffer.to_bytes())) as zf:
            return [(info.filename, zf.open(info).read()) for info in zf.infolist()]

    return _entries


@pytest.fixture
def zip_entry(zip_entries):
    """Read one entry of a finished SIP by name."""

    def _entry(buffer: MemoryBuffer, name: str) -> bytes:
        for entry_name, content in zip_entries(buffer):
            if entry_name == name:
                return content
        raise KeyError(name)

    return _entry


@pytest.fixture
def parse_xml():
    return lambda data: etree.fromstring(data)
