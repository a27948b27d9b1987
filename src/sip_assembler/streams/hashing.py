"""Hash assemblers: incremental hashing of streamed content."""

import base64
import hashlib
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from schemas.hashing import EncodedHash

ENCODERS: dict[str, Callable[[bytes], str]] = {
    "base64": lambda digest: base64.b64encode(digest).decode("ascii"),
    "base64url": lambda digest: base64.urlsafe_b64encode(digest).decode("ascii"),
    "hex": lambda digest: digest.hex(),
}


class HashAssembler(ABC):
    """Abstract base class for hash assemblers.

    A hash assembler observes every chunk of a stream while it is being
    written and, at the end of the stream, yields zero or more encoded hashes.
    It always counts the bytes it observed, even when it doesn't hash them.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Prepare for a new stream, discarding state from a previous one."""
        pass

    @abstractmethod
    def add(self, data: bytes) -> None:
        """Observe the next chunk of the stream."""
        pass

    @abstractmethod
    def get(self) -> list[EncodedHash]:
        """Return the hashes of the stream observed since initialize()."""
        pass

    @property
    @abstractmethod
    def num_bytes_hashed(self) -> int:
        """Number of bytes observed since initialize()."""
        pass


class NoHashAssembler(HashAssembler):
    """Hash assembler that doesn't hash, but still counts bytes."""

    def __init__(self) -> None:
        self._num_bytes = 0

    def initialize(self) -> None:
        self._num_bytes = 0

    def add(self, data: bytes) -> None:
        self._num_bytes += len(data)

    def get(self) -> list[EncodedHash]:
        return []

    @property
    def num_bytes_hashed(self) -> int:
        return self._num_bytes


class DefaultHashAssembler(HashAssembler):
    """Hash assembler backed by hashlib.

    Computes one hash per configured algorithm in a single pass over the
    stream. Hashes are returned in the order the algorithms were given.

    Attributes:
        algorithms: hashlib algorithm names (e.g., "sha256", "md5")
        encoding: Encoding of the digests ("base64", "base64url" or "hex")
    """

    def __init__(self, algorithms: Iterable[str] = ("sha256",), encoding: str = "base64"):
        self.algorithms = tuple(algorithms)
        if not self.algorithms:
            raise ValueError("at least one hash algorithm is required")
        for algorithm in self.algorithms:
            _validate_algorithm(algorithm)
        if encoding not in ENCODERS:
            raise ValueError(
                f"unsupported hash encoding: {encoding} "
                f"(expected one of {', '.join(sorted(ENCODERS))})"
            )
        self.encoding = encoding
        self.initialize()

    def __repr__(self) -> str:
        return f"DefaultHashAssembler({list(self.algorithms)}, '{self.encoding}')"

    def initialize(self) -> None:
        self._hashers = [hashlib.new(algorithm) for algorithm in self.algorithms]
        self._num_bytes = 0

    def add(self, data: bytes) -> None:
        for hasher in self._hashers:
            hasher.update(data)
        self._num_bytes += len(data)

    def get(self) -> list[EncodedHash]:
        encode = ENCODERS[self.encoding]
        return [
            EncodedHash(
                algorithm=algorithm,
                encoding=self.encoding,
                value=encode(hasher.digest()),
            )
            for algorithm, hasher in zip(self.algorithms, self._hashers)
        ]

    @property
    def num_bytes_hashed(self) -> int:
        return self._num_bytes


def _validate_algorithm(algorithm: str) -> None:
    """Reject algorithms hashlib doesn't know or that need a digest length."""
    try:
        hasher = hashlib.new(algorithm)
    except ValueError as e:
        raise ValueError(f"unsupported hash algorithm: {algorithm}") from e
    if hasher.name.startswith("shake_"):
        raise ValueError(f"variable-length hash algorithm not supported: {algorithm}")
