"""Digital objects and their extraction from domain objects."""

import io
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, BinaryIO

StreamSupplier = Callable[[], BinaryIO]

# Maps a domain object to the digital objects it contains. Called once per
# domain object added to a SIP; the iterator may be lazy and may be empty.
DigitalObjectsExtraction = Callable[[Any], Iterator["DigitalObject"]]


class DigitalObject:
    """A named binary payload of a domain object.

    The stream is opened by the SIP assembler, which closes it after the
    content is written to the SIP.

    Attributes:
        reference_information: Name of the object within the SIP; the PDI
                               refers to the content by this name
    """

    def __init__(self, reference_information: str, supplier: StreamSupplier):
        self.reference_information = reference_information
        self._supplier = supplier

    def __repr__(self) -> str:
        return f"DigitalObject('{self.reference_information}')"

    def open(self) -> BinaryIO:
        """Open a new stream over the content."""
        return self._supplier()

    @classmethod
    def from_bytes(cls, reference_information: str, data: bytes) -> "DigitalObject":
        return cls(reference_information, lambda: io.BytesIO(data))

    @classmethod
    def from_path(cls, reference_information: str, path: Path) -> "DigitalObject":
        return cls(reference_information, lambda: Path(path).open("rb"))


def no_digital_objects(domain_object: Any) -> Iterator[DigitalObject]:
    """Extraction for domain objects without unstructured content."""
    return iter(())
