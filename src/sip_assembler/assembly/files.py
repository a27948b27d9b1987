"""Archiving plain files: collection, content extraction, and PDI.

Each regular file under a directory becomes one domain object (a
SourceFile) with exactly one digital object, its own content. The PDI lists
the files with their sizes and content hashes:

    <files xmlns="urn:sip-assembler:files:1.0">
      <file>
        <name>reports/q1.pdf</name>
        <size>48213</size>
        <content ref="reports/q1.pdf">
          <hash algorithm="sha256" encoding="base64">...</hash>
        </content>
      </file>
    </files>
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from lxml import etree

from schemas.hashing import EncodedHash
from schemas.source_file import SourceFile

from .extraction import DigitalObject
from .pdi_assembler import SchemaSource, XmlPdiAssembler

logger = logging.getLogger(__name__)

FILES_NS = "urn:sip-assembler:files:1.0"


def collect_source_files(directory: Path) -> list[SourceFile]:
    """Collect the regular files under a directory, sorted by relative name.

    Args:
        directory: Directory to collect files from (recursively)

    Returns:
        List of SourceFile objects in name order
    """
    files = []
    for path in directory.rglob("*"):
        if not path.is_file():
            continue
        name = path.relative_to(directory).as_posix()
        files.append(SourceFile(name=name, path=path, size=path.stat().st_size))
    files.sort(key=lambda f: f.name)
    logger.debug(f"Collected {len(files)} files from {directory}")
    return files


def extract_source_file(source_file: SourceFile) -> Iterator[DigitalObject]:
    """Extract the content of a source file as its only digital object."""
    yield DigitalObject.from_path(source_file.name, source_file.path)


class FilesPdiAssembler(XmlPdiAssembler[SourceFile]):
    """PDI assembler that describes SourceFile domain objects."""

    def __init__(self, namespace: str = FILES_NS, schema: SchemaSource | None = None):
        super().__init__(namespace, "files", schema)

    def build_element(
        self,
        domain_object: SourceFile,
        content_hashes: Mapping[str, Iterable[EncodedHash]],
    ) -> etree._Element:
        file_el = self.element("file")
        self.sub_element(file_el, "name", domain_object.name)
        self.sub_element(file_el, "size", str(domain_object.size))
        for reference, hashes in content_hashes.items():
            content_el = self.sub_element(file_el, "content")
            content_el.set("ref", reference)
            self.add_hashes(content_el, hashes)
        return file_el
