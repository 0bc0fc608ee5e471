from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum
import os


class ProjectKind(str, Enum):
    RUST = "rust"
    TYPESCRIPT = "typescript"
    SOLIDITY = "solidity"
    GO = "go"


class BuildMetadata(BaseModel):
    build_time: float = Field(..., ge=0, description="Wall-clock seconds spent compiling")
    compiler_version: str = Field(default="unknown")
    target: str = Field(..., description="Compilation target, e.g. wasm32-unknown-unknown")
    optimization_level: str = Field(default="release")


class BuildArtifact(BaseModel):
    path: str                       # compiled output file
    project_path: str               # project the artifact was built from
    kind: Optional[ProjectKind] = None   # unknown for prebuilt files
    size: int = Field(default=0, ge=0)
    hex_encoded: bool = False       # solc writes hex text instead of raw bytes
    warnings: List[str] = Field(default_factory=list)
    metadata: Optional[BuildMetadata] = None

    @property
    def name(self) -> str:
        """Ledger key: the artifact file name without its extension."""
        return os.path.splitext(os.path.basename(self.path))[0]

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as f:
            data = f.read()
        if self.hex_encoded:
            text = data.decode("ascii").strip()
            if text.startswith("0x"):
                text = text[2:]
            return bytes.fromhex(text)
        return data

    @classmethod
    def from_file(cls, path: str, kind: Optional[ProjectKind] = None) -> "BuildArtifact":
        """Wrap an already compiled file (``gblend deploy <path>``)."""
        hex_encoded = path.endswith(".bin")
        if kind is None and hex_encoded:
            kind = ProjectKind.SOLIDITY
        return cls(
            path=path,
            project_path=os.path.dirname(os.path.abspath(path)),
            kind=kind,
            size=os.path.getsize(path) if os.path.exists(path) else 0,
            hex_encoded=hex_encoded,
        )
