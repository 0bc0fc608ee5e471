import hashlib
from pydantic import BaseModel, ConfigDict

CHUNK_SIZE = 1 << 16


class ArtifactFingerprint(BaseModel):
    """SHA-256 digest of a compiled artifact; the deployment idempotency key."""

    model_config = ConfigDict(frozen=True)

    digest: bytes

    def hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return self.hex()

    @classmethod
    def from_hex(cls, value: str) -> "ArtifactFingerprint":
        if value.startswith("0x"):
            value = value[2:]
        return cls(digest=bytes.fromhex(value))


def fingerprint(data: bytes) -> ArtifactFingerprint:
    return ArtifactFingerprint(digest=hashlib.sha256(data).digest())


def fingerprint_file(path: str) -> ArtifactFingerprint:
    """Hash a file without loading it into memory at once."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            h.update(chunk)
    return ArtifactFingerprint(digest=h.digest())
