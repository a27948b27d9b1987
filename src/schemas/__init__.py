"""Schema definitions for SIP Assembler."""

from .contents import HashedContents
from .hashing import EncodedHash
from .packaging_information import DataSubmissionSession, PackagingInformation
from .source_file import SourceFile

__all__ = [
    "DataSubmissionSession",
    "EncodedHash",
    "HashedContents",
    "PackagingInformation",
    "SourceFile",
]
