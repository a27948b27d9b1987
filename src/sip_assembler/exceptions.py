"""Custom exceptions for SIP assembly."""


class SipError(Exception):
    """Base exception for all SIP assembly errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class RuntimeIoError(SipError):
    """Raised when an I/O failure aborts a SIP assembly step.

    The original ``OSError`` is available as ``__cause__``. The SIP being
    assembled must be discarded.
    """

    pass


class AssemblyStateError(SipError):
    """Raised when an assembler is used out of its start/add/end order."""

    pass


class BufferStateError(SipError):
    """Raised when a data buffer is written twice or read before it is written."""

    pass


class ZipStateError(SipError):
    """Raised when a zip assembler is used before begin() or after close()."""

    pass


class PdiValidationError(OSError):
    """Raised when a PDI does not validate against its XML Schema.

    This is an ``OSError`` so that it surfaces from the SIP assembler as an
    I/O failure, like any other problem writing the PDI.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ZipEntryTooLargeError(OSError):
    """Raised when an entry outgrows what its ZIP headers can describe.

    Only happens when ZIP64 headers are switched off for a zip assembler.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
