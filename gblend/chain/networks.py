from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigError


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    endpoint: str
    chain_id: int

    def __str__(self) -> str:
        return f"Network: {self.name}\nEndpoint: {self.endpoint}\nChain ID: {self.chain_id}"


LOCAL = NetworkConfig(name="local", endpoint="http://localhost:8545", chain_id=1337)
DEV = NetworkConfig(name="dev", endpoint="https://rpc.dev.gblend.xyz", chain_id=20993)


def resolve_network(
    local: bool = False,
    dev: bool = False,
    rpc: Optional[str] = None,
    chain_id: Optional[int] = None,
) -> NetworkConfig:
    """Pick exactly one network from the --local / --dev / --rpc+--chain-id flags."""
    if (local or dev) and (rpc or chain_id is not None):
        raise ConfigError("--rpc/--chain-id cannot be combined with --local or --dev")
    if local and dev:
        raise ConfigError("Choose one of --local or --dev")
    if local:
        return LOCAL
    if dev:
        return DEV
    if rpc and chain_id is not None:
        return NetworkConfig(name=f"chain-{chain_id}", endpoint=rpc, chain_id=chain_id)
    raise ConfigError("Please specify either --local, --dev, or both --rpc and --chain-id.")
