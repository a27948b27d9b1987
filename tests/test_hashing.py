"""Tests for hash assemblers."""

import base64
import hashlib

import pytest

from schemas.hashing import EncodedHash
from sip_assembler.streams import DefaultHashAssembler, NoHashAssembler


class TestNoHashAssembler:
    """Tests for NoHashAssembler."""

    def test_no_hashes(self):
        """No hashes are produced."""
        assembler = NoHashAssembler()
        assembler.initialize()
        assembler.add(b"content")

        assert assembler.get() == []

    def test_counts_bytes(self):
        """Bytes are counted even though nothing is hashed."""
        assembler = NoHashAssembler()
        assembler.initialize()
        assembler.add(b"12345")
        assembler.add(b"678")

        assert assembler.num_bytes_hashed == 8

    def test_initialize_resets_count(self):
        """initialize() starts counting from zero."""
        assembler = NoHashAssembler()
        assembler.add(b"12345")
        assembler.initialize()

        assert assembler.num_bytes_hashed == 0


class TestDefaultHashAssembler:
    """Tests for DefaultHashAssembler."""

    def test_sha256_base64_by_default(self):
        """The default is a base64-encoded SHA-256 hash."""
        assembler = DefaultHashAssembler()
        assembler.add(b"hello ")
        assembler.add(b"world")

        assert assembler.get() == [
            EncodedHash(
                algorithm="sha256",
                encoding="base64",
                value=base64.b64encode(hashlib.sha256(b"hello world").digest()).decode(),
            )
        ]
        assert assembler.num_bytes_hashed == 11

    def test_several_algorithms_in_order(self):
        """One hash per algorithm, in the order given."""
        assembler = DefaultHashAssembler(["md5", "sha1"], encoding="hex")
        assembler.add(b"abc")

        hashes = assembler.get()
        assert [h.algorithm for h in hashes] == ["md5", "sha1"]
        assert hashes[0].value == hashlib.md5(b"abc").hexdigest()
        assert hashes[1].value == hashlib.sha1(b"abc").hexdigest()

    def test_base64url_encoding(self):
        """base64url uses the URL-safe alphabet."""
        assembler = DefaultHashAssembler(encoding="base64url")
        assembler.add(b"\xff" * 64)

        expected = base64.urlsafe_b64encode(hashlib.sha256(b"\xff" * 64).digest()).decode()
        assert assembler.get()[0].value == expected

    def test_initialize_resets_hash(self):
        """initialize() discards the previous stream."""
        assembler = DefaultHashAssembler(encoding="hex")
        assembler.add(b"old")
        assembler.initialize()
        assembler.add(b"new")

        assert assembler.get()[0].value == hashlib.sha256(b"new").hexdigest()
        assert assembler.num_bytes_hashed == 3

    def test_empty_stream(self):
        """An empty stream still has a hash."""
        assembler = DefaultHashAssembler(encoding="hex")

        assert assembler.get()[0].value == hashlib.sha256(b"").hexdigest()
        assert assembler.num_bytes_hashed == 0

    def test_unknown_algorithm(self):
        """Unknown algorithms are rejected up front."""
        with pytest.raises(ValueError, match="unsupported hash algorithm"):
            DefaultHashAssembler(["sha-3000"])

    def test_variable_length_algorithm(self):
        """SHAKE algorithms are rejected because they need a digest length."""
        with pytest.raises(ValueError, match="variable-length"):
            DefaultHashAssembler(["shake_128"])

    def test_unknown_encoding(self):
        """Unknown encodings are rejected up front."""
        with pytest.raises(ValueError, match="unsupported hash encoding"):
            DefaultHashAssembler(encoding="base32")

    def test_no_algorithms(self):
        """At least one algorithm is required."""
        with pytest.raises(ValueError):
            DefaultHashAssembler([])
