"""SIP Assembler: streaming assembly of Submission Information Packages."""

from .assembly import Generator, SipAssembler, XmlPdiAssembler
from .exceptions import RuntimeIoError, SipError

__all__ = ["Generator", "RuntimeIoError", "SipAssembler", "SipError", "XmlPdiAssembler"]
