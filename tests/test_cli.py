"""Tests for the CLI module."""

import json
import logging
import zipfile

import pytest
from lxml import etree

from sip_assembler.assembly.packaging_information import SIP_NS
from sip_assembler.assembly.sip_assembler import PACKAGING_INFORMATION_ENTRY, PDI_ENTRY
from sip_assembler.cli import build_hash_assembler, load_prototype, main
from sip_assembler.streams import DefaultHashAssembler, NoHashAssembler


@pytest.fixture
def input_dir(tmp_path):
    """Directory with two files to package."""
    directory = tmp_path / "input"
    (directory / "calls").mkdir(parents=True)
    (directory / "calls" / "c1.txt").write_text("first call")
    (directory / "readme.txt").write_text("readme")
    return directory


class TestCLIPackage:
    """Tests for the package command."""

    def test_package_creates_sip(self, input_dir, tmp_path, caplog):
        """package writes a SIP with one entry per file plus PDI and PI."""
        caplog.set_level(logging.INFO)
        output = tmp_path / "out" / "sip.zip"

        result = main(["package", "--input", str(input_dir), "--output", str(output)])

        assert result == 0
        with zipfile.ZipFile(output) as zf:
            assert zf.namelist() == [
                "calls/c1.txt",
                "readme.txt",
                PDI_ENTRY,
                PACKAGING_INFORMATION_ENTRY,
            ]
        assert "Created SIP:" in caplog.text
        assert "AIUs: 2" in caplog.text

    def test_package_hashes_pdi_by_default(self, input_dir, tmp_path):
        """The Packaging Information carries a sha256 PDI hash by default."""
        output = tmp_path / "sip.zip"

        main(["package", "--input", str(input_dir), "--output", str(output)])

        with zipfile.ZipFile(output) as zf:
            sip = etree.fromstring(zf.read(PACKAGING_INFORMATION_ENTRY))
        hash_el = sip.find(f"{{{SIP_NS}}}pdi_hash")
        assert hash_el.get("algorithm") == "sha256"
        assert hash_el.get("encoding") == "base64"
        assert sip.findtext(f"{{{SIP_NS}}}aiu_count") == "2"

    def test_package_no_pdi_hash(self, input_dir, tmp_path):
        """--no-pdi-hash leaves the PDI hash out."""
        output = tmp_path / "sip.zip"

        main([
            "package",
            "--input", str(input_dir),
            "--output", str(output),
            "--no-pdi-hash",
        ])

        with zipfile.ZipFile(output) as zf:
            sip = etree.fromstring(zf.read(PACKAGING_INFORMATION_ENTRY))
        assert sip.find(f"{{{SIP_NS}}}pdi_hash") is None

    def test_package_with_prototype(self, input_dir, tmp_path):
        """--prototype fills the Packaging Information from JSON."""
        prototype = tmp_path / "prototype.json"
        prototype.write_text(json.dumps({
            "dss": {"holding": "Files", "id": "dss-1", "priority": 2},
            "production_date": "2026-01-15T12:00:00Z",
        }))
        output = tmp_path / "sip.zip"

        result = main([
            "package",
            "--input", str(input_dir),
            "--output", str(output),
            "--prototype", str(prototype),
        ])

        assert result == 0
        with zipfile.ZipFile(output) as zf:
            sip = etree.fromstring(zf.read(PACKAGING_INFORMATION_ENTRY))
        assert sip.findtext(f"{{{SIP_NS}}}dss/{{{SIP_NS}}}holding") == "Files"
        assert sip.findtext(f"{{{SIP_NS}}}dss/{{{SIP_NS}}}priority") == "2"

    def test_package_with_file_pdi_buffer(self, input_dir, tmp_path):
        """--pdi-buffer file produces the same SIP as the memory buffer."""
        memory_output = tmp_path / "memory.zip"
        file_output = tmp_path / "file.zip"

        main(["package", "--input", str(input_dir), "--output", str(memory_output)])
        main([
            "package",
            "--input", str(input_dir),
            "--output", str(file_output),
            "--pdi-buffer", "file",
        ])

        assert memory_output.read_bytes() == file_output.read_bytes()

    def test_package_content_hashes(self, input_dir, tmp_path):
        """--content-hash adds hashes of the file contents to the PDI."""
        output = tmp_path / "sip.zip"

        main([
            "package",
            "--input", str(input_dir),
            "--output", str(output),
            "--content-hash", "md5",
            "--content-hash", "sha1",
            "--encoding", "hex",
        ])

        with zipfile.ZipFile(output) as zf:
            pdi = etree.fromstring(zf.read(PDI_ENTRY))
        algorithms = [el.get("algorithm") for el in pdi.iter("{*}hash")]
        assert algorithms == ["md5", "sha1", "md5", "sha1"]

    def test_package_missing_input(self, tmp_path, caplog):
        """package fails when the input directory doesn't exist."""
        result = main([
            "package",
            "--input", str(tmp_path / "missing"),
            "--output", str(tmp_path / "sip.zip"),
        ])

        assert result == 1
        assert "Input directory not found" in caplog.text

    def test_package_rejects_output_inside_input(self, input_dir, caplog):
        """package refuses to write the SIP into the directory it packages."""
        result = main([
            "package",
            "--input", str(input_dir),
            "--output", str(input_dir / "sip.zip"),
        ])

        assert result == 1
        assert "Output must not be inside the input directory" in caplog.text

    def test_package_invalid_prototype(self, input_dir, tmp_path, caplog):
        """package fails when the prototype isn't valid."""
        prototype = tmp_path / "prototype.json"
        prototype.write_text(json.dumps({"seqno": "not a number"}))

        result = main([
            "package",
            "--input", str(input_dir),
            "--output", str(tmp_path / "sip.zip"),
            "--prototype", str(prototype),
        ])

        assert result == 1
        assert "Invalid Packaging Information prototype" in caplog.text

    def test_package_unknown_algorithm(self, input_dir, tmp_path, caplog):
        """package fails on an unknown hash algorithm."""
        result = main([
            "package",
            "--input", str(input_dir),
            "--output", str(tmp_path / "sip.zip"),
            "--pdi-hash", "not-a-hash",
        ])

        assert result == 1
        assert "unsupported hash algorithm: not-a-hash" in caplog.text

    def test_no_command_prints_help(self, capsys):
        """Without a command, help is printed."""
        result = main([])

        assert result == 0
        assert "package" in capsys.readouterr().out


class TestCLIHelpers:
    """Tests for CLI helper functions."""

    def test_build_hash_assembler_without_algorithms(self):
        """No algorithms means no hashing."""
        assert isinstance(build_hash_assembler(None, "base64"), NoHashAssembler)
        assert isinstance(build_hash_assembler([], "base64"), NoHashAssembler)

    def test_build_hash_assembler(self):
        """Algorithms produce a DefaultHashAssembler."""
        assert isinstance(build_hash_assembler(["sha256"], "hex"), DefaultHashAssembler)

    def test_load_prototype(self, tmp_path):
        """load_prototype() validates the JSON as Packaging Information."""
        path = tmp_path / "prototype.json"
        path.write_text(json.dumps({"dss": {"holding": "H"}, "seqno": 4}))

        prototype = load_prototype(path)

        assert prototype.dss.holding == "H"
        assert prototype.seqno == 4
