from .engine import DeploymentEngine, DeploymentOutcome, DeployState, ReconcileEntry

__all__ = ["DeploymentEngine", "DeploymentOutcome", "DeployState", "ReconcileEntry"]
