"""
Error taxonomy for the build and deploy lifecycle.

Every error raised by the core derives from ``GblendError`` and is propagated
to the caller unchanged; the CLI is the only place that formats them.
"""
from enum import Enum
from typing import Optional


class BuildErrorKind(str, Enum):
    TOOLCHAIN_MISSING = "ToolchainMissing"
    COMPILE_FAILED = "CompileFailed"
    ARTIFACT_NOT_FOUND = "ArtifactNotFound"
    INVALID_PROJECT = "InvalidProject"


class ChainErrorKind(str, Enum):
    UNREACHABLE = "Unreachable"
    REJECTED = "Rejected"
    INSUFFICIENT_FUNDS = "InsufficientFunds"


class DeploymentErrorKind(str, Enum):
    NO_CONTRACT_ADDRESS = "NoContractAddress"
    LEDGER_READ_FAILURE = "LedgerReadFailure"
    LEDGER_WRITE_FAILURE = "LedgerWriteFailure"
    UNCONFIRMED = "Unconfirmed"
    ARTIFACT_UNREADABLE = "ArtifactUnreadable"


ORPHAN_KINDS = (DeploymentErrorKind.LEDGER_WRITE_FAILURE, DeploymentErrorKind.UNCONFIRMED)


class GblendError(Exception):
    """Base class for all errors surfaced by gblend."""

    kind: Optional[Enum] = None

    def __init__(self, message: str, kind: Optional[Enum] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        if self.kind is None:
            return self.message
        return f"{self.kind.value}: {self.message}"


class BuildError(GblendError):
    """Raised by a toolchain when a project cannot be compiled."""

    def __init__(self, kind: BuildErrorKind, message: str, diagnostics: str = ""):
        super().__init__(message, kind)
        # Raw compiler output, kept verbatim for the user
        self.diagnostics = diagnostics

    def __str__(self) -> str:
        text = super().__str__()
        if self.diagnostics:
            text = f"{text}\n{self.diagnostics.rstrip()}"
        return text


class ChainError(GblendError):
    """Raised by a chain client when a network call fails."""

    def __init__(self, kind: ChainErrorKind, message: str):
        super().__init__(message, kind)


class DeploymentError(GblendError):
    """Raised by the deployment engine and the ledger."""

    def __init__(
        self,
        kind: DeploymentErrorKind,
        message: str,
        address: Optional[str] = None,
        tx_hash: Optional[str] = None,
    ):
        super().__init__(message, kind)
        self.address = address
        self.tx_hash = tx_hash

    @property
    def orphaned(self) -> bool:
        """True when the chain holds a contract the ledger failed to record."""
        return self.kind in ORPHAN_KINDS and self.address is not None


class ConfigError(GblendError):
    """Missing or malformed configuration (network, key, env files)."""


class InitError(GblendError):
    """Raised when a project cannot be scaffolded."""
