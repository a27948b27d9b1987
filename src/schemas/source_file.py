"""Source file domain object."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SourceFile:
    """A file on disk that is archived as one domain object.

    Attributes:
        name: Path relative to the packaged directory, using forward slashes.
              Also used as the reference information of the file's content.
        path: Absolute path to the file
        size: Size of the file in bytes when it was collected
    """

    name: str
    path: Path
    size: int
