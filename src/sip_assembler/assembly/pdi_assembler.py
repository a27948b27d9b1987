"""XML PDI assembler.

Writes the Preservation Description Information (PDI) incrementally with
lxml's ``etree.xmlfile``: the root element is opened at start(), one element
is serialized per domain object, and the root is closed at end(). Only the
element for the current domain object is ever held in memory.

Subclasses decide what the PDI looks like by implementing build_element().
"""

import logging
from collections.abc import Iterable, Mapping
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, TypeVar

from lxml import etree

from schemas.contents import HashedContents
from schemas.hashing import EncodedHash
from sip_assembler.exceptions import AssemblyStateError, PdiValidationError
from sip_assembler.streams.buffers import DataBuffer

from .assembler import Assembler

logger = logging.getLogger(__name__)

D = TypeVar("D")

SchemaSource = bytes | str | Path | BinaryIO


class XmlPdiAssembler(Assembler[HashedContents[D]]):
    """Base class for assemblers that write the PDI as XML.

    Attributes:
        namespace: Namespace of the PDI elements
        root_element: Local name of the PDI root element
    """

    def __init__(
        self,
        namespace: str,
        root_element: str,
        schema: SchemaSource | None = None,
    ):
        """Initialize the PDI assembler.

        Args:
            namespace: Namespace of the PDI elements
            root_element: Local name of the PDI root element
            schema: Optional XML Schema; when given, the finished PDI is
                    validated against it in end()
        """
        self.namespace = namespace
        self.root_element = root_element
        self._schema = _load_schema(schema) if schema is not None else None
        self._buffer: DataBuffer | None = None
        self._stack: ExitStack | None = None
        self._writer = None

    def tag(self, name: str) -> str:
        """Qualified name of a PDI element."""
        return f"{{{self.namespace}}}{name}"

    def start(self, buffer: DataBuffer) -> None:
        with ExitStack() as stack:
            stream = stack.enter_context(buffer.open_for_writing())
            writer = stack.enter_context(etree.xmlfile(stream, encoding="UTF-8"))
            writer.write_declaration()
            stack.enter_context(
                writer.element(self.tag(self.root_element), nsmap={None: self.namespace})
            )
            self._stack = stack.pop_all()
        self._buffer = buffer
        self._writer = writer

    def add(self, hashed_contents: HashedContents[D]) -> None:
        if self._writer is None:
            raise AssemblyStateError("PDI assembler has not been started")
        element = self.build_element(
            hashed_contents.domain_object, hashed_contents.content_hashes
        )
        if element is not None:
            self._writer.write(element)
        self._writer.flush()

    def end(self) -> None:
        if self._stack is None:
            raise AssemblyStateError("PDI assembler has not been started")
        self._stack.close()
        self._stack = None
        self._writer = None
        if self._schema is not None:
            self._validate()

    def build_element(
        self,
        domain_object: D,
        content_hashes: Mapping[str, Iterable[EncodedHash]],
    ) -> etree._Element | None:
        """Build the PDI element for one domain object.

        Args:
            domain_object: The domain object being added
            content_hashes: Reference information -> hashes of each of the
                            domain object's digital objects, sorted by name

        Returns:
            The element to write, or None to write nothing
        """
        raise NotImplementedError("Subclasses must implement build_element()")

    def element(self, name: str, text: str | None = None) -> etree._Element:
        """Create a detached PDI element."""
        el = etree.Element(self.tag(name), nsmap={None: self.namespace})
        if text is not None:
            el.text = text
        return el

    def sub_element(
        self, parent: etree._Element, name: str, text: str | None = None
    ) -> etree._Element:
        """Append a PDI element to a parent."""
        el = etree.SubElement(parent, self.tag(name))
        if text is not None:
            el.text = text
        return el

    def add_hashes(
        self, parent: etree._Element, hashes: Iterable[EncodedHash]
    ) -> None:
        """Append one hash element per encoded hash."""
        for encoded_hash in hashes:
            hash_el = self.sub_element(parent, "hash", encoded_hash.value)
            hash_el.set("algorithm", encoded_hash.algorithm)
            hash_el.set("encoding", encoded_hash.encoding)

    def _validate(self) -> None:
        """Validate the finished PDI against the schema.

        Raises:
            PdiValidationError: If the PDI is not valid
        """
        assert self._buffer is not None and self._schema is not None
        with self._buffer.open_for_reading() as stream:
            document = etree.parse(stream)
        if not self._schema.validate(document):
            errors = [
                f"line {error.line}: {error.message}" for error in self._schema.error_log
            ]
            logger.error(f"PDI failed schema validation with {len(errors)} error(s)")
            raise PdiValidationError(
                f"PDI is not valid according to its schema: {errors[0]}", errors
            )
        logger.debug("PDI passed schema validation")


def _load_schema(schema: SchemaSource) -> etree.XMLSchema:
    """Parse an XML Schema from bytes, a path, or a binary stream."""
    if isinstance(schema, bytes):
        return etree.XMLSchema(etree.fromstring(schema))
    if isinstance(schema, (str, Path)):
        return etree.XMLSchema(etree.parse(str(schema)))
    return etree.XMLSchema(etree.parse(schema))
