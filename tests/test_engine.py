import os
import tempfile
from unittest.mock import patch

import pytest
from hypothesis import given, settings, strategies as st

from conftest import FakeChainClient, read_events
from gblend.contracts.artifact import BuildArtifact, ProjectKind
from gblend.contracts.fingerprint import fingerprint
from gblend.deploy.engine import DeploymentEngine, DeployState
from gblend.errors import (
    ChainError,
    ChainErrorKind,
    DeploymentError,
    DeploymentErrorKind,
)
from gblend.memory.ledger import DeploymentLedger

ADDR_1 = "0x" + "11" * 20
ADDR_2 = "0x" + "22" * 20


def make_engine(tmp_path, client, **kwargs):
    ledger = DeploymentLedger(str(tmp_path / "deployments" / "local.json"))
    return DeploymentEngine(client, ledger, network="local", **kwargs), ledger


def test_greeting_scenario(tmp_path, write_artifact):
    """Deploy, redeploy unchanged, then deploy changed bytes under one name."""
    client = FakeChainClient(addresses=[ADDR_1, ADDR_2])
    engine, ledger = make_engine(tmp_path, client)
    h1 = fingerprint(bytes.fromhex("aa01")).hex()
    h2 = fingerprint(bytes.fromhex("bb02")).hex()

    first = engine.deploy(write_artifact("greeting.wasm", bytes.fromhex("aa01")))
    assert first.address == ADDR_1
    assert not first.skipped
    record = DeploymentLedger(ledger.path).load().lookup("greeting")
    assert (record.content_hash, record.address) == (h1, ADDR_1)

    calls_after_first = list(client.calls)
    second = engine.deploy(write_artifact("greeting.wasm", bytes.fromhex("aa01")))
    assert second.address == ADDR_1
    assert second.skipped
    assert client.calls == calls_after_first

    third = engine.deploy(write_artifact("greeting.wasm", bytes.fromhex("bb02")))
    assert third.address == ADDR_2
    assert len(client.sent) == 2
    record = DeploymentLedger(ledger.path).load().lookup("greeting")
    assert (record.content_hash, record.address) == (h2, ADDR_2)


@settings(max_examples=25, deadline=None)
@given(st.binary(max_size=512))
def test_deploying_same_bytes_twice_submits_once(data):
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "contract.wasm")
        with open(path, "wb") as f:
            f.write(data)
        client = FakeChainClient(addresses=[ADDR_1, ADDR_2])
        engine = DeploymentEngine(client, DeploymentLedger(os.path.join(tmp, "ledger.json")))

        first = engine.deploy(path)
        second = engine.deploy(path)

        assert len(client.sent) == 1
        assert second.address == first.address == ADDR_1
        assert second.skipped


def test_transaction_payload(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1], gas_price=42)
    engine, _ = make_engine(tmp_path, client)

    outcome = engine.deploy(write_artifact("greeting.wasm", b"\x00asm\x01\x00\x00\x00"))

    assert client.sent == [{"data": "0x0061736d01000000", "gasLimit": 300_000_000, "gasPrice": 42}]
    assert client.calls == ["get_fee_data", "send_transaction", "wait", "wait_for_confirmations"]
    assert outcome.gas_price == 42
    assert outcome.history == [
        DeployState.IDLE,
        DeployState.HASH_COMPUTED,
        DeployState.LEDGER_CHECKED,
        DeployState.FEE_QUERIED,
        DeployState.SUBMITTED,
        DeployState.CONFIRMED,
        DeployState.LEDGER_UPDATED,
        DeployState.DONE,
    ]


def test_explicit_gas_price_skips_fee_query(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1])
    engine, _ = make_engine(tmp_path, client, gas_price=5, gas_limit=1_000_000)
    engine.deploy(write_artifact("greeting.wasm", b"\x01"))
    assert "get_fee_data" not in client.calls
    assert client.sent[0]["gasPrice"] == 5
    assert client.sent[0]["gasLimit"] == 1_000_000


def test_skip_history(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1])
    engine, _ = make_engine(tmp_path, client)
    path = write_artifact("greeting.wasm", b"\x01")
    engine.deploy(path)
    outcome = engine.deploy(path)
    assert outcome.history == [
        DeployState.IDLE,
        DeployState.HASH_COMPUTED,
        DeployState.LEDGER_CHECKED,
        DeployState.SKIPPED,
        DeployState.DONE,
    ]


def test_same_bytes_under_another_name_deploys_again(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1, ADDR_2])
    engine, ledger = make_engine(tmp_path, client)
    path = write_artifact("greeting.wasm", b"\x01")
    engine.deploy(path)
    outcome = engine.deploy(path, artifact_name="greeting-v2")
    assert outcome.address == ADDR_2
    assert {r.artifact_name for r in ledger.records()} == {"greeting", "greeting-v2"}


def test_receipt_without_address_is_fatal_and_not_recorded(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[])
    engine, ledger = make_engine(tmp_path, client)

    with pytest.raises(DeploymentError) as exc:
        engine.deploy(write_artifact("greeting.wasm", b"\x01"))

    assert exc.value.kind == DeploymentErrorKind.NO_CONTRACT_ADDRESS
    assert exc.value.tx_hash == "0x%064x" % 1
    assert not os.path.exists(ledger.path)


def test_reverted_receipt_is_rejected(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1], status=0)
    engine, ledger = make_engine(tmp_path, client)

    with pytest.raises(ChainError) as exc:
        engine.deploy(write_artifact("greeting.wasm", b"\x01"))

    assert exc.value.kind == ChainErrorKind.REJECTED
    assert not os.path.exists(ledger.path)


def test_chain_errors_propagate_without_retry(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1])
    engine, ledger = make_engine(tmp_path, client)

    with patch.object(client, "send_transaction",
                      side_effect=ChainError(ChainErrorKind.INSUFFICIENT_FUNDS, "insufficient funds")) as send:
        with pytest.raises(ChainError) as exc:
            engine.deploy(write_artifact("greeting.wasm", b"\x01"))

    assert exc.value.kind == ChainErrorKind.INSUFFICIENT_FUNDS
    assert send.call_count == 1
    assert not os.path.exists(ledger.path)


def test_ledger_write_failure_after_submission_reports_orphan(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1])
    engine, ledger = make_engine(tmp_path, client)
    failure = DeploymentError(DeploymentErrorKind.LEDGER_WRITE_FAILURE, "disk full")

    with patch.object(ledger, "_write", side_effect=failure):
        with pytest.raises(DeploymentError) as exc:
            engine.deploy(write_artifact("greeting.wasm", b"\x01"))

    assert exc.value.kind == DeploymentErrorKind.LEDGER_WRITE_FAILURE
    assert exc.value.orphaned
    assert exc.value.address == ADDR_1
    assert exc.value.tx_hash == "0x%064x" % 1


def test_confirmation_failure_after_receipt_reports_orphan(tmp_path, write_artifact):
    lost = ChainError(ChainErrorKind.UNREACHABLE, "eth_blockNumber failed on http://localhost:8545: refused")
    client = FakeChainClient(addresses=[ADDR_1], confirm_error=lost)
    engine, ledger = make_engine(tmp_path, client)

    with pytest.raises(DeploymentError) as exc:
        engine.deploy(write_artifact("greeting.wasm", b"\x01"))

    assert exc.value.kind == DeploymentErrorKind.UNCONFIRMED
    assert exc.value.orphaned
    assert exc.value.address == ADDR_1
    assert exc.value.tx_hash == "0x%064x" % 1
    assert "refused" in str(exc.value)
    assert not os.path.exists(ledger.path)


def test_unexpected_client_error_is_logged_as_failed(tmp_path, write_artifact):
    log_path = str(tmp_path / "events.jsonl")
    client = FakeChainClient(addresses=[ADDR_1])
    engine, _ = make_engine(tmp_path, client, event_log=log_path)

    with patch.object(client, "send_transaction", side_effect=TypeError("bad transaction field")):
        with pytest.raises(TypeError):
            engine.deploy(write_artifact("greeting.wasm", b"\x01"))

    events = read_events(log_path)
    assert [e["event"] for e in events] == ["failed"]
    assert events[0]["state"] == DeployState.FAILED.value
    assert "bad transaction field" in events[0]["error"]


def test_empty_artifact_is_deployed_like_any_other(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1])
    engine, ledger = make_engine(tmp_path, client)

    outcome = engine.deploy(write_artifact("empty.wasm", b""))

    assert client.sent[0]["data"] == "0x"
    assert outcome.address == ADDR_1
    assert ledger.lookup("empty").content_hash == fingerprint(b"").hex()


def test_missing_artifact_fails_before_touching_chain(tmp_path):
    client = FakeChainClient(addresses=[ADDR_1])
    engine, _ = make_engine(tmp_path, client)

    with pytest.raises(DeploymentError) as exc:
        engine.deploy(str(tmp_path / "nope.wasm"))

    assert exc.value.kind == DeploymentErrorKind.ARTIFACT_UNREADABLE
    assert client.calls == []


def test_unreadable_ledger_fails_before_touching_chain(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1])
    engine, ledger = make_engine(tmp_path, client)
    os.makedirs(os.path.dirname(ledger.path))
    with open(ledger.path, "w") as f:
        f.write("garbage")

    with pytest.raises(DeploymentError) as exc:
        engine.deploy(write_artifact("greeting.wasm", b"\x01"))

    assert exc.value.kind == DeploymentErrorKind.LEDGER_READ_FAILURE
    assert client.calls == []


def test_solidity_hex_artifact_is_decoded(tmp_path):
    path = tmp_path / "Greeting.bin"
    path.write_text("6080604052\n")
    artifact = BuildArtifact(path=str(path), project_path=str(tmp_path),
                             kind=ProjectKind.SOLIDITY, hex_encoded=True)
    client = FakeChainClient(addresses=[ADDR_1])
    engine, ledger = make_engine(tmp_path, client)

    engine.deploy(artifact)

    assert client.sent[0]["data"] == "0x6080604052"
    assert ledger.lookup("Greeting").content_hash == fingerprint(bytes.fromhex("6080604052")).hex()


def test_event_log_records_each_outcome(tmp_path, write_artifact):
    log_path = str(tmp_path / "logs" / "deployments.jsonl")
    client = FakeChainClient(addresses=[ADDR_1])
    engine, _ = make_engine(tmp_path, client, event_log=log_path)
    path = write_artifact("greeting.wasm", b"\x01")

    engine.deploy(path)
    engine.deploy(path)
    with pytest.raises(DeploymentError):
        engine.deploy(write_artifact("other.wasm", b"\x02"))  # no addresses left

    events = read_events(log_path)
    assert [e["event"] for e in events] == ["deployed", "skipped", "failed"]
    assert events[0]["address"] == ADDR_1
    assert "NoContractAddress" in events[2]["error"]


def test_reconcile_reports_without_writing(tmp_path, write_artifact):
    client = FakeChainClient(addresses=[ADDR_1, ADDR_2], code={ADDR_1: b"\x00asm"})
    engine, ledger = make_engine(tmp_path, client)
    engine.deploy(write_artifact("alpha.wasm", b"\x01"))
    engine.deploy(write_artifact("beta.wasm", b"\x02"))
    before = open(ledger.path).read()

    entries = engine.reconcile()

    assert [(e.artifact_name, e.present) for e in entries] == [("alpha", True), ("beta", False)]
    assert open(ledger.path).read() == before
