"""Encoded hash schema."""

from pydantic import BaseModel


class EncodedHash(BaseModel):
    """A digest tagged with the algorithm and encoding that produced it.

    Attributes:
        algorithm: Hash algorithm name (e.g., "sha256")
        encoding: Encoding of the digest value ("base64", "base64url" or "hex")
        value: Encoded digest
    """

    algorithm: str
    encoding: str
    value: str

    model_config = {"frozen": True}
