"""Generate a complete SIP from a collection of domain objects in one call."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

from sip_assembler.streams.buffers import DataBuffer, DataBufferSupplier, FileBuffer, MemoryBuffer

from .assembler import Assembler
from .metrics import SipMetrics

logger = logging.getLogger(__name__)

D = TypeVar("D")


@dataclass
class GenerationResult:
    """Outcome of generating a SIP.

    Attributes:
        buffer: Buffer holding the finished SIP
        metrics: Metrics of the assembly
    """

    buffer: DataBuffer
    metrics: SipMetrics


class Generator(Generic[D]):
    """Run an assembler over all domain objects of an iterable.

    Example:
        generator = Generator(sip_assembler)
        result = generator.generate_file(records, Path("out/sip.zip"))
        print(result.metrics.num_aius)
    """

    def __init__(
        self,
        assembler: Assembler[D],
        buffer_supplier: DataBufferSupplier = MemoryBuffer,
    ):
        self.assembler = assembler
        self.buffer_supplier = buffer_supplier

    def generate(self, domain_objects: Iterable[D]) -> GenerationResult:
        """Generate a SIP into a buffer from the buffer supplier."""
        return self._generate(domain_objects, self.buffer_supplier())

    def generate_file(self, domain_objects: Iterable[D], path: Path) -> GenerationResult:
        """Generate a SIP into a file."""
        return self._generate(domain_objects, FileBuffer(path))

    def _generate(self, domain_objects: Iterable[D], buffer: DataBuffer) -> GenerationResult:
        self.assembler.start(buffer)
        for domain_object in domain_objects:
            self.assembler.add(domain_object)
        self.assembler.end()
        metrics = self.assembler.get_metrics()
        logger.debug(f"Generated SIP into {buffer!r}: {metrics!r}")
        return GenerationResult(buffer=buffer, metrics=metrics)
