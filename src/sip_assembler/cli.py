"""Command-line interface for sip-assembler."""

import argparse
import json
import logging
import sys
from pathlib import Path

from schemas.packaging_information import PackagingInformation
from sip_assembler.assembly import (
    FilesPdiAssembler,
    Generator,
    SipAssembler,
    collect_source_files,
    extract_source_file,
)
from sip_assembler.streams import (
    DefaultHashAssembler,
    HashAssembler,
    MemoryBuffer,
    NoHashAssembler,
    file_buffer_supplier,
    from_temporary_directory,
)

DEFAULT_PDI_HASH = "sha256"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def load_prototype(path: Path) -> PackagingInformation:
    """Load a Packaging Information prototype from a JSON file."""
    data = json.loads(path.read_text())
    return PackagingInformation.model_validate(data)


def build_hash_assembler(algorithms: list[str] | None, encoding: str) -> HashAssembler:
    """Hash with the given algorithms, or not at all when there are none."""
    if not algorithms:
        return NoHashAssembler()
    return DefaultHashAssembler(algorithms, encoding)


def package(args: argparse.Namespace) -> int:
    """Execute the package command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    input_dir = args.input.resolve()
    if not input_dir.is_dir():
        logger.error(f"Input directory not found: {input_dir}")
        return 1

    output_path = args.output.resolve()
    if output_path.is_relative_to(input_dir):
        logger.error(f"Output must not be inside the input directory: {output_path}")
        return 1

    try:
        prototype = (
            load_prototype(args.prototype) if args.prototype else PackagingInformation()
        )
    except Exception as e:
        logger.error(f"Invalid Packaging Information prototype: {e}")
        return 1

    pdi_algorithms = [] if args.no_pdi_hash else (args.pdi_hash or [DEFAULT_PDI_HASH])
    try:
        pdi_hash_assembler = build_hash_assembler(pdi_algorithms, args.encoding)
        content_hash_assembler = build_hash_assembler(args.content_hash, args.encoding)
    except ValueError as e:
        logger.error(str(e))
        return 1

    if args.pdi_buffer == "file":
        pdi_buffer_supplier = file_buffer_supplier(from_temporary_directory())
    else:
        pdi_buffer_supplier = MemoryBuffer

    assembler = SipAssembler.for_pdi_and_content(
        prototype,
        FilesPdiAssembler(),
        extract_source_file,
        pdi_hash_assembler=pdi_hash_assembler,
        content_hash_assembler=content_hash_assembler,
        pdi_buffer_supplier=pdi_buffer_supplier,
    )

    try:
        source_files = collect_source_files(input_dir)
        result = Generator(assembler).generate_file(source_files, output_path)
    except Exception as e:
        logger.error(f"Failed to assemble SIP: {e}")
        return 1

    metrics = result.metrics
    logger.info(f"Created SIP: {output_path}")
    logger.info(f"  AIUs: {metrics.num_aius}")
    logger.info(f"  Digital objects: {metrics.num_digital_objects}")
    logger.info(f"  Content size: {metrics.size_digital_objects} bytes")
    logger.info(f"  PDI size: {metrics.size_pdi} bytes")
    if assembler.pdi_hash is not None:
        logger.info(
            f"  PDI hash: {assembler.pdi_hash.algorithm}:{assembler.pdi_hash.value}"
        )
    logger.info(f"  Assembly time: {metrics.assembly_time} ms")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="sip-assembler",
        description="Assemble Submission Information Packages (SIPs) for archival ingest",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    package_parser = subparsers.add_parser(
        "package",
        help="Package the files of a directory into a SIP",
        description="Assemble a Submission Information Package (SIP) with one AIU per file in a directory. File contents are added as digital objects and described in the PDI.",
    )
    package_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Directory with the files to package",
    )
    package_parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Path of the SIP (ZIP) file to write",
    )
    package_parser.add_argument(
        "--prototype",
        type=Path,
        default=None,
        help="JSON file with the Packaging Information prototype",
    )
    package_parser.add_argument(
        "--pdi-buffer",
        choices=["memory", "file"],
        default="memory",
        help="Where to hold the PDI while it is assembled (default: memory)",
    )
    package_parser.add_argument(
        "--pdi-hash",
        action="append",
        metavar="ALGORITHM",
        help=f"Hash algorithm for the PDI; may be repeated (default: {DEFAULT_PDI_HASH})",
    )
    package_parser.add_argument(
        "--no-pdi-hash",
        action="store_true",
        help="Don't hash the PDI",
    )
    package_parser.add_argument(
        "--content-hash",
        action="append",
        metavar="ALGORITHM",
        help="Hash algorithm for file contents; may be repeated (default: no hashing)",
    )
    package_parser.add_argument(
        "--encoding",
        choices=["base64", "base64url", "hex"],
        default="base64",
        help="Encoding of hash values (default: base64)",
    )
    package_parser.set_defaults(func=package)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
