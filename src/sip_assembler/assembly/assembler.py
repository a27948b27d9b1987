"""Base class for assemblers."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from sip_assembler.streams.buffers import DataBuffer

from .metrics import SipMetrics

D = TypeVar("D")


class Assembler(ABC, Generic[D]):
    """Abstract base class for assemblers.

    An assembler writes objects to a data buffer in three phases: start()
    once, add() for each object, then end() once.
    """

    @abstractmethod
    def start(self, buffer: DataBuffer) -> None:
        """Start assembling into the buffer."""
        pass

    @abstractmethod
    def add(self, domain_object: D) -> None:
        """Add an object to the output."""
        pass

    @abstractmethod
    def end(self) -> None:
        """Finish the output and complete the buffer."""
        pass

    def get_metrics(self) -> SipMetrics:
        return SipMetrics()
