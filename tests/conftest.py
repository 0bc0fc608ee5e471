import json
import os

import pytest

from gblend.chain.client import ChainClient, FeeData, Receipt, TxHandle

TEST_KEY = "0x" + "ab" * 32


class FakeChainClient(ChainClient):
    """In-memory chain: hands out the given addresses in order and records every call."""

    def __init__(self, addresses=(), gas_price=7, status=1, code=None, confirm_error=None):
        self.addresses = list(addresses)
        self.gas_price = gas_price
        self.status = status
        self.code = code or {}
        self.confirm_error = confirm_error
        self.calls = []
        self.sent = []
        self.address = "0x" + "de" * 20

    def get_fee_data(self):
        self.calls.append("get_fee_data")
        return FeeData(gas_price=self.gas_price)

    def send_transaction(self, tx):
        self.calls.append("send_transaction")
        self.sent.append(tx)
        return TxHandle(tx_hash="0x%064x" % len(self.sent))

    def wait(self, handle):
        self.calls.append("wait")
        address = self.addresses.pop(0) if self.addresses else None
        return Receipt(
            tx_hash=handle.tx_hash,
            status=self.status,
            contract_address=address,
            block_number=100 + len(self.sent),
            gas_used=50_000,
            effective_gas_price=self.gas_price,
        )

    def wait_for_confirmations(self, receipt):
        self.calls.append("wait_for_confirmations")
        if self.confirm_error is not None:
            raise self.confirm_error

    def get_block_number(self):
        self.calls.append("get_block_number")
        return 200

    def get_code(self, address):
        self.calls.append("get_code")
        return self.code.get(address, b"")


@pytest.fixture
def chain():
    return FakeChainClient


@pytest.fixture
def write_artifact(tmp_path):
    def _write(name: str, data: bytes) -> str:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)
    return _write


def read_events(path) -> list:
    """Parse a JSONL event log written by the deployment engine."""
    if not os.path.exists(path):
        return []
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
