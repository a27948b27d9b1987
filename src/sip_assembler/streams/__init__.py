"""Byte streams: data buffers, hashing, and zip containers."""

from .buffers import DataBuffer, FileBuffer, MemoryBuffer, file_buffer_supplier
from .file_supplier import from_directory, from_temporary_directory, sequential
from .hashing import DefaultHashAssembler, HashAssembler, NoHashAssembler
from .zip_assembler import DefaultZipAssembler, ZipAssembler

__all__ = [
    "DataBuffer",
    "DefaultHashAssembler",
    "DefaultZipAssembler",
    "FileBuffer",
    "HashAssembler",
    "MemoryBuffer",
    "NoHashAssembler",
    "ZipAssembler",
    "file_buffer_supplier",
    "from_directory",
    "from_temporary_directory",
    "sequential",
]
