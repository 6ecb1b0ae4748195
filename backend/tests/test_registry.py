import re

from share_relay.core.ids import ALPHABET, ID_LENGTH, generate_unique_id
from share_relay.models import ShareRecord
from share_relay.services.registry import ShareRegistry


def test_put_and_get():
    registry = ShareRegistry()
    record = ShareRecord(file_name="a.txt", file_url="https://example.com/a.txt")

    registry.put("abcd1234", record)

    assert registry.get("abcd1234") == record
    assert "abcd1234" in registry
    assert len(registry) == 1


def test_missing_identifier_returns_none():
    registry = ShareRegistry()
    assert registry.get("nope") is None
    assert "nope" not in registry


def test_put_overwrites_existing_entry():
    registry = ShareRegistry()
    registry.put("same", ShareRecord(file_name="old.txt", file_url="https://example.com/old"))
    registry.put("same", ShareRecord(file_name="new.txt", file_url="https://example.com/new"))

    assert registry.get("same").file_name == "new.txt"
    assert len(registry) == 1


def test_registry_starts_from_seed_records():
    seed = {"PERMTEST": ShareRecord(file_name="test.jpg", file_url="https://example.com/t.png")}
    registry = ShareRegistry(seed)

    assert registry.get("PERMTEST").file_url == "https://example.com/t.png"
    seed.clear()
    assert "PERMTEST" in registry


def test_generated_ids_use_alphanumeric_alphabet():
    assert len(ALPHABET) == 62
    for _ in range(200):
        unique_id = generate_unique_id()
        assert len(unique_id) == ID_LENGTH == 8
        assert re.fullmatch(r"[A-Za-z0-9]{8}", unique_id)


def test_generated_ids_vary():
    assert len({generate_unique_id() for _ in range(50)}) > 1
