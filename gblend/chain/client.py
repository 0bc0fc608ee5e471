"""
Chain client: the only component that talks to the network.

``ChainClient`` is the interface the deployment engine consumes;
``Web3ChainClient`` implements it over JSON-RPC with web3.py and signs
locally with eth_account.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from eth_account import Account
from requests.exceptions import ConnectionError as RequestsConnectionError, Timeout
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from ..errors import ChainError, ChainErrorKind, ConfigError
from .networks import NetworkConfig

logger = logging.getLogger(__name__)


@dataclass
class FeeData:
    gas_price: int


@dataclass
class TxHandle:
    tx_hash: str


@dataclass
class Receipt:
    tx_hash: str
    status: int
    contract_address: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    effective_gas_price: Optional[int] = None


class ChainClient:
    def get_fee_data(self) -> FeeData: raise NotImplementedError
    def send_transaction(self, tx: Dict[str, Any]) -> TxHandle: raise NotImplementedError
    def wait(self, handle: TxHandle) -> Receipt: raise NotImplementedError
    def wait_for_confirmations(self, receipt: Receipt) -> None: raise NotImplementedError
    def get_block_number(self) -> int: raise NotImplementedError
    def get_code(self, address: str) -> bytes: raise NotImplementedError


def classify_rpc_error(exc: BaseException) -> ChainErrorKind:
    if isinstance(exc, (RequestsConnectionError, Timeout, ConnectionError)):
        return ChainErrorKind.UNREACHABLE
    if "insufficient funds" in str(exc).lower():
        return ChainErrorKind.INSUFFICIENT_FUNDS
    return ChainErrorKind.REJECTED


class Web3ChainClient(ChainClient):
    """JSON-RPC chain client with a local signer.

    ``receipt_timeout`` bounds how long ``wait`` polls for inclusion.
    ``wait_for_confirmations`` then blocks until the receipt's block is
    ``confirmations`` blocks deep.
    """

    def __init__(
        self,
        network: NetworkConfig,
        private_key: Optional[str] = None,
        confirmations: int = 0,
        receipt_timeout: float = 120.0,
        poll_interval: float = 1.0,
        w3: Optional[Web3] = None,
    ):
        self.network = network
        self.account = Account.from_key(private_key) if private_key else None
        self.confirmations = confirmations
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.w3 = w3 or Web3(Web3.HTTPProvider(network.endpoint))

    @property
    def address(self) -> Optional[str]:
        return self.account.address if self.account else None

    def _require_signer(self):
        if self.account is None:
            raise ConfigError("A deployer key is required to send transactions")
        return self.account

    def _call(self, what: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except TimeExhausted:
            raise
        except (RequestsConnectionError, Timeout, ConnectionError, ValueError, Web3Exception) as e:
            kind = classify_rpc_error(e)
            raise ChainError(kind, f"{what} failed on {self.network.endpoint}: {e}") from e

    def get_fee_data(self) -> FeeData:
        gas_price = self._call("eth_gasPrice", lambda: self.w3.eth.gas_price)
        return FeeData(gas_price=int(gas_price))

    def send_transaction(self, tx: Dict[str, Any]) -> TxHandle:
        account = self._require_signer()
        nonce = self._call(
            "eth_getTransactionCount",
            self.w3.eth.get_transaction_count,
            account.address,
            "pending",
        )
        # No "to" field: contract creation
        unsigned = {
            "from": account.address,
            "data": tx["data"],
            "gas": int(tx["gasLimit"]),
            "gasPrice": int(tx["gasPrice"]),
            "nonce": nonce,
            "chainId": self.network.chain_id,
            "value": 0,
        }
        signed = account.sign_transaction(unsigned)
        raw = getattr(signed, "raw_transaction", None) or signed.rawTransaction
        tx_hash = self._call("eth_sendRawTransaction", self.w3.eth.send_raw_transaction, raw)
        return TxHandle(tx_hash=Web3.to_hex(tx_hash))

    def wait(self, handle: TxHandle) -> Receipt:
        try:
            raw = self._call(
                "eth_getTransactionReceipt",
                self.w3.eth.wait_for_transaction_receipt,
                handle.tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=self.poll_interval,
            )
        except TimeExhausted as e:
            raise ChainError(
                ChainErrorKind.UNREACHABLE,
                f"Transaction {handle.tx_hash} not mined within {self.receipt_timeout}s",
            ) from e

        return Receipt(
            tx_hash=Web3.to_hex(raw["transactionHash"]),
            status=int(raw.get("status", 1)),
            contract_address=raw.get("contractAddress"),
            block_number=raw.get("blockNumber"),
            gas_used=raw.get("gasUsed"),
            effective_gas_price=raw.get("effectiveGasPrice"),
        )

    def wait_for_confirmations(self, receipt: Receipt) -> None:
        if self.confirmations <= 0 or receipt.block_number is None:
            return
        block_number = receipt.block_number
        logger.info("Waiting for %d confirmation(s)", self.confirmations)
        while True:
            current = self.get_block_number()
            if max(current - block_number, 0) >= self.confirmations:
                return
            time.sleep(self.poll_interval)

    def get_block_number(self) -> int:
        return int(self._call("eth_blockNumber", lambda: self.w3.eth.block_number))

    def get_code(self, address: str) -> bytes:
        code = self._call(
            "eth_getCode", lambda: self.w3.eth.get_code(Web3.to_checksum_address(address))
        )
        return bytes(code)
