from hypothesis import assume, given, strategies as st

from gblend.contracts.fingerprint import ArtifactFingerprint, fingerprint, fingerprint_file

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


@given(st.binary())
def test_fingerprint_is_deterministic(data):
    assert fingerprint(data) == fingerprint(data)
    assert len(fingerprint(data).digest) == 32


@given(st.binary(), st.binary())
def test_distinct_bytes_give_distinct_fingerprints(a, b):
    assume(a != b)
    assert fingerprint(a) != fingerprint(b)


def test_empty_input_is_hashed():
    assert fingerprint(b"").hex() == EMPTY_SHA256


def test_fingerprint_file_matches_in_memory_hash(tmp_path):
    data = bytes(range(256)) * 1000  # spans several read chunks
    path = tmp_path / "contract.wasm"
    path.write_bytes(data)
    assert fingerprint_file(str(path)) == fingerprint(data)


def test_from_hex_accepts_prefixed_digest():
    fp = fingerprint(b"\xaa\x01")
    assert ArtifactFingerprint.from_hex("0x" + fp.hex()) == fp
    assert str(fp) == fp.hex()
