"""
gblend - scaffold, build and deploy smart contracts for a hybrid WASM/EVM chain.
"""

__version__ = "0.4.0"

from .contracts import ProjectKind, BuildArtifact, ArtifactFingerprint, DeploymentRecord, fingerprint
from .deploy import DeploymentEngine, DeploymentOutcome, DeployState
from .drivers import get_driver, InitOptions
from .memory import DeploymentLedger
from .errors import GblendError, BuildError, ChainError, DeploymentError, ConfigError, InitError

__all__ = [
    "ProjectKind",
    "BuildArtifact",
    "ArtifactFingerprint",
    "DeploymentRecord",
    "fingerprint",
    "DeploymentEngine",
    "DeploymentOutcome",
    "DeployState",
    "get_driver",
    "InitOptions",
    "DeploymentLedger",
    "GblendError",
    "BuildError",
    "ChainError",
    "DeploymentError",
    "ConfigError",
    "InitError",
]
