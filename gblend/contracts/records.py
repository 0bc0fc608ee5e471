from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
import time


class DeploymentRecord(BaseModel):
    """One deployed artifact, as stored in the ledger file.

    The on-disk keys (``address``, ``bytecodeHex``, ``deployedBytecodeHex``,
    ``contentHash``) are the aliases; ``artifact_name`` is the ledger key and
    is not repeated inside the stored value.
    """

    artifact_name: str = Field(..., exclude=True)
    address: str
    bytecode: str = Field(..., alias="bytecodeHex")
    deployed_bytecode: str = Field(..., alias="deployedBytecodeHex")
    content_hash: str = Field(..., alias="contentHash")
    abi: List[Dict[str, Any]] = Field(default_factory=list)
    tx_hash: Optional[str] = Field(default=None, alias="txHash")
    block_number: Optional[int] = Field(default=None, alias="blockNumber")
    network: Optional[str] = None
    deployed_at: float = Field(default_factory=time.time, alias="deployedAt")

    class Config:
        populate_by_name = True

    def to_store(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_store(cls, artifact_name: str, value: Dict[str, Any]) -> "DeploymentRecord":
        return cls(artifact_name=artifact_name, **value)
