"""Hashed contents of a domain object."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, TypeVar

from .hashing import EncodedHash

D = TypeVar("D")


@dataclass(frozen=True)
class HashedContents(Generic[D]):
    """A domain object paired with the hashes of its digital objects.

    The content hashes are keyed by the reference information of each digital
    object. The mapping is sorted by key and read-only, so iteration order does
    not depend on the order in which the digital objects were extracted.

    Attributes:
        domain_object: The domain object added to the SIP
        content_hashes: Reference information -> hashes of that digital object
    """

    domain_object: D
    content_hashes: Mapping[str, tuple[EncodedHash, ...]] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        sorted_hashes = {
            name: tuple(hashes)
            for name, hashes in sorted(self.content_hashes.items())
        }
        object.__setattr__(self, "content_hashes", MappingProxyType(sorted_hashes))

    @property
    def references(self) -> list[str]:
        return list(self.content_hashes)

    def hashes_for(self, reference: str) -> Iterable[EncodedHash]:
        return self.content_hashes.get(reference, ())
