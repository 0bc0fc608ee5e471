from .client import ChainClient, Web3ChainClient, FeeData, TxHandle, Receipt
from .networks import NetworkConfig, resolve_network, LOCAL, DEV

__all__ = [
    "ChainClient",
    "Web3ChainClient",
    "FeeData",
    "TxHandle",
    "Receipt",
    "NetworkConfig",
    "resolve_network",
    "LOCAL",
    "DEV",
]
