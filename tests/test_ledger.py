import json
import os
from unittest.mock import patch

import pytest

from gblend.contracts.records import DeploymentRecord
from gblend.errors import DeploymentError, DeploymentErrorKind
from gblend.memory.ledger import DeploymentLedger


def make_record(name="greeting", address="0x" + "11" * 20, content_hash="aa" * 32):
    return DeploymentRecord(
        artifact_name=name,
        address=address,
        bytecode="0xaa01",
        deployed_bytecode="0xaa01",
        content_hash=content_hash,
    )


def test_missing_file_is_an_empty_ledger(tmp_path):
    ledger = DeploymentLedger(str(tmp_path / "local.json")).load()
    assert len(ledger) == 0
    assert ledger.lookup("greeting") is None


def test_upsert_persists_in_the_documented_format(tmp_path):
    path = tmp_path / "deployments" / "local.json"
    DeploymentLedger(str(path)).upsert(make_record())

    stored = json.loads(path.read_text())
    assert set(stored) == {"greeting"}
    value = stored["greeting"]
    assert value["address"] == "0x" + "11" * 20
    assert value["bytecodeHex"] == "0xaa01"
    assert value["deployedBytecodeHex"] == "0xaa01"
    assert value["contentHash"] == "aa" * 32
    assert value["abi"] == []
    assert "artifact_name" not in value

    reloaded = DeploymentLedger(str(path)).load().lookup("greeting")
    assert reloaded.address == "0x" + "11" * 20
    assert reloaded.content_hash == "aa" * 32


def test_upsert_replaces_existing_record(tmp_path):
    path = str(tmp_path / "local.json")
    ledger = DeploymentLedger(path)
    ledger.upsert(make_record(address="0x" + "11" * 20, content_hash="aa" * 32))
    ledger.upsert(make_record(address="0x" + "22" * 20, content_hash="bb" * 32))
    ledger.upsert(make_record(name="other"))

    reloaded = DeploymentLedger(path).load()
    assert len(reloaded) == 2
    assert reloaded.lookup("greeting").address == "0x" + "22" * 20
    assert [r.artifact_name for r in reloaded.records()] == ["greeting", "other"]


def test_invalid_json_is_a_read_failure(tmp_path):
    path = tmp_path / "local.json"
    path.write_text("{not json")
    with pytest.raises(DeploymentError) as exc:
        DeploymentLedger(str(path)).load()
    assert exc.value.kind == DeploymentErrorKind.LEDGER_READ_FAILURE


def test_non_object_ledger_is_a_read_failure(tmp_path):
    path = tmp_path / "local.json"
    path.write_text("[]")
    with pytest.raises(DeploymentError) as exc:
        DeploymentLedger(str(path)).load()
    assert exc.value.kind == DeploymentErrorKind.LEDGER_READ_FAILURE


def test_record_missing_fields_is_a_read_failure(tmp_path):
    path = tmp_path / "local.json"
    path.write_text(json.dumps({"greeting": {"address": "0x1"}}))
    with pytest.raises(DeploymentError) as exc:
        DeploymentLedger(str(path)).load()
    assert exc.value.kind == DeploymentErrorKind.LEDGER_READ_FAILURE


def test_unwritable_location_is_a_write_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    ledger = DeploymentLedger(str(blocker / "local.json"))

    with pytest.raises(DeploymentError) as exc:
        ledger.upsert(make_record())
    assert exc.value.kind == DeploymentErrorKind.LEDGER_WRITE_FAILURE
    assert ledger.lookup("greeting") is None


def test_failed_replace_leaves_previous_ledger_intact(tmp_path):
    path = tmp_path / "local.json"
    ledger = DeploymentLedger(str(path))
    ledger.upsert(make_record(content_hash="aa" * 32))
    before = path.read_text()

    with patch("os.replace", side_effect=OSError("disk full")):
        with pytest.raises(DeploymentError):
            ledger.upsert(make_record(content_hash="bb" * 32))

    assert path.read_text() == before
    assert ledger.lookup("greeting").content_hash == "aa" * 32
    assert os.listdir(tmp_path) == ["local.json"]


def test_for_network_uses_one_file_per_network(tmp_path):
    ledger = DeploymentLedger.for_network(str(tmp_path), "dev")
    assert ledger.path == os.path.join(str(tmp_path), "dev.json")
