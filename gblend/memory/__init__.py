from .ledger import DeploymentLedger

__all__ = ["DeploymentLedger"]
