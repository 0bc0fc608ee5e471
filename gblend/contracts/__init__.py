from .artifact import ProjectKind, BuildArtifact, BuildMetadata
from .fingerprint import ArtifactFingerprint, fingerprint, fingerprint_file
from .records import DeploymentRecord

__all__ = [
    "ProjectKind",
    "BuildArtifact",
    "BuildMetadata",
    "ArtifactFingerprint",
    "fingerprint",
    "fingerprint_file",
    "DeploymentRecord",
]
