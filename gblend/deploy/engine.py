"""
Idempotent deployment of compiled artifacts.

An artifact is deployed at most once per content version: the SHA-256 of its
bytes is compared with the fingerprint stored in the ledger under the
artifact's name, and only a changed (or unknown) artifact produces a
contract-creation transaction.

Known gap: if the process dies after the transaction is submitted but before
the ledger is written, the next run has no record of the contract and will
deploy again. Nothing here queries the chain to recover a missed address;
``reconcile`` only reports whether recorded addresses still hold code.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from ..chain.client import ChainClient, Receipt
from ..contracts.artifact import BuildArtifact
from ..contracts.fingerprint import ArtifactFingerprint, fingerprint
from ..contracts.records import DeploymentRecord
from ..errors import ChainError, ChainErrorKind, DeploymentError, DeploymentErrorKind, GblendError
from ..memory.ledger import DeploymentLedger
from ..utils.jsonl import append_event

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 300_000_000


class DeployState(str, Enum):
    IDLE = "Idle"
    HASH_COMPUTED = "HashComputed"
    LEDGER_CHECKED = "LedgerChecked"
    SKIPPED = "Skipped"
    FEE_QUERIED = "FeeQueried"
    SUBMITTED = "Submitted"
    CONFIRMED = "Confirmed"
    LEDGER_UPDATED = "LedgerUpdated"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class DeploymentOutcome:
    artifact_name: str
    state: DeployState = DeployState.IDLE
    fingerprint: Optional[ArtifactFingerprint] = None
    address: Optional[str] = None
    tx_hash: Optional[str] = None
    gas_price: Optional[int] = None
    receipt: Optional[Receipt] = None
    history: List[DeployState] = field(default_factory=list)

    def __post_init__(self):
        self.history.append(self.state)

    @property
    def skipped(self) -> bool:
        return DeployState.SKIPPED in self.history

    def advance(self, state: DeployState):
        logger.debug("%s: %s -> %s", self.artifact_name, self.state.value, state.value)
        self.state = state
        self.history.append(state)


@dataclass
class ReconcileEntry:
    artifact_name: str
    address: str
    present: bool


class DeploymentEngine:
    """Hash, compare, submit, confirm, record.

    The engine owns the ledger. Network calls (fee query, submission, receipt
    wait) block for as long as the chain client blocks; no timeout or retry
    is applied here.
    """

    def __init__(
        self,
        client: ChainClient,
        ledger: DeploymentLedger,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        gas_price: Optional[int] = None,
        network: Optional[str] = None,
        event_log: Optional[str] = None,
    ):
        self.client = client
        self.ledger = ledger
        self.gas_limit = gas_limit
        self.gas_price = gas_price or None  # 0 means "ask the node"
        self.network = network
        self.event_log = event_log

    def deploy(
        self,
        artifact: Union[str, BuildArtifact],
        artifact_name: Optional[str] = None,
    ) -> DeploymentOutcome:
        if isinstance(artifact, str):
            artifact = BuildArtifact.from_file(artifact)
        outcome = DeploymentOutcome(artifact_name=artifact_name or artifact.name)

        try:
            self._run(artifact, outcome)
        except Exception as e:
            outcome.advance(DeployState.FAILED)
            self._log_event("failed", outcome, error=str(e))
            raise

        self._log_event("skipped" if outcome.skipped else "deployed", outcome)
        return outcome

    def _run(self, artifact: BuildArtifact, outcome: DeploymentOutcome):
        name = outcome.artifact_name

        try:
            data = artifact.read_bytes()
        except (OSError, ValueError) as e:
            raise DeploymentError(
                DeploymentErrorKind.ARTIFACT_UNREADABLE,
                f"Failed to read artifact {artifact.path}: {e}",
            ) from e
        outcome.fingerprint = fingerprint(data)
        outcome.advance(DeployState.HASH_COMPUTED)

        existing = self.ledger.load().lookup(name)
        outcome.advance(DeployState.LEDGER_CHECKED)

        if existing is not None and existing.content_hash == outcome.fingerprint.hex():
            logger.info("%s unchanged (%s); existing contract at %s",
                        name, outcome.fingerprint.hex()[:12], existing.address)
            outcome.address = existing.address
            outcome.tx_hash = existing.tx_hash
            outcome.advance(DeployState.SKIPPED)
            outcome.advance(DeployState.DONE)
            return

        gas_price = self.gas_price
        if gas_price is None:
            gas_price = self.client.get_fee_data().gas_price
        outcome.gas_price = gas_price
        outcome.advance(DeployState.FEE_QUERIED)

        bytecode = "0x" + data.hex()
        tx = {"data": bytecode, "gasLimit": self.gas_limit, "gasPrice": gas_price}
        logger.info("Deploying %s (%d bytes, gas limit %d, gas price %d)",
                    name, len(data), self.gas_limit, gas_price)
        handle = self.client.send_transaction(tx)
        outcome.tx_hash = handle.tx_hash
        outcome.advance(DeployState.SUBMITTED)

        receipt = self.client.wait(handle)
        outcome.receipt = receipt
        outcome.advance(DeployState.CONFIRMED)

        if receipt.status != 1:
            message = f"Transaction {receipt.tx_hash} failed (gas used {receipt.gas_used} of {self.gas_limit})"
            if receipt.gas_used is not None and receipt.gas_used >= self.gas_limit:
                message += "; gas limit reached, increase --gas-limit"
            raise ChainError(ChainErrorKind.REJECTED, message)

        if not receipt.contract_address:
            raise DeploymentError(
                DeploymentErrorKind.NO_CONTRACT_ADDRESS,
                f"Transaction {receipt.tx_hash} was mined but created no contract",
                tx_hash=receipt.tx_hash,
            )
        outcome.address = receipt.contract_address

        try:
            self.client.wait_for_confirmations(receipt)
        except GblendError as e:
            raise self._orphan(
                DeploymentErrorKind.UNCONFIRMED, name, receipt,
                f"confirmation wait failed: {e}", e,
            ) from e

        record = DeploymentRecord(
            artifact_name=name,
            address=receipt.contract_address,
            bytecode=bytecode,
            deployed_bytecode=bytecode,
            content_hash=outcome.fingerprint.hex(),
            abi=[],
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number,
            network=self.network,
        )
        try:
            self.ledger.upsert(record)
        except DeploymentError as e:
            raise self._orphan(
                DeploymentErrorKind.LEDGER_WRITE_FAILURE, name, receipt,
                f"the ledger {self.ledger.path} could not be written", e,
            ) from e
        outcome.advance(DeployState.LEDGER_UPDATED)
        outcome.advance(DeployState.DONE)
        logger.info("%s deployed at %s", name, receipt.contract_address)

    def _orphan(self, kind, name, receipt, reason, cause) -> DeploymentError:
        logger.critical(
            "Contract %s deployed at %s (tx %s) but %s; the next deploy will not know about it",
            name, receipt.contract_address, receipt.tx_hash, reason,
        )
        return DeploymentError(
            kind,
            cause.message,
            address=receipt.contract_address,
            tx_hash=receipt.tx_hash,
        )

    def reconcile(self) -> List[ReconcileEntry]:
        """Report whether each recorded address still has code on chain. Read-only."""
        entries = []
        for record in self.ledger.load().records():
            code = self.client.get_code(record.address)
            entries.append(ReconcileEntry(record.artifact_name, record.address, len(code) > 0))
        return entries

    def _log_event(self, event: str, outcome: DeploymentOutcome, error: Optional[str] = None):
        if not self.event_log:
            return
        entry = {
            "event": event,
            "artifact": outcome.artifact_name,
            "state": outcome.state.value,
            "content_hash": outcome.fingerprint.hex() if outcome.fingerprint else None,
            "address": outcome.address,
            "tx_hash": outcome.tx_hash,
            "network": self.network,
        }
        if error:
            entry["error"] = error
        try:
            append_event(self.event_log, entry)
        except OSError as e:
            logger.warning("Could not append to event log %s: %s", self.event_log, e)
