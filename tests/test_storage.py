import pytest
from botocore.exceptions import ClientError

from bracket_engine import (
    StaleBracketError,
    TournamentRecord,
    TournamentStorage,
    apply_winner,
)
from bracket_engine.storage import open_table


def conditional_failure(operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {
                "Code": "ConditionalCheckFailedException",
                "Message": "The conditional request failed",
            }
        },
        operation,
    )


class FakeTable:
    def __init__(self) -> None:
        self.items: dict[tuple[str, str], dict[str, object]] = {}

    def get_item(self, *, Key):
        return {"Item": self.items.get((Key["pk"], Key["sk"]))}

    def put_item(
        self, *, Item, ConditionExpression=None, ExpressionAttributeValues=None
    ):
        item_key = (Item["pk"], Item["sk"])
        if ConditionExpression is not None:
            existing = self.items.get(item_key)
            expected = (ExpressionAttributeValues or {}).get(":expected")
            allowed = existing is not None and existing.get("version") == expected
            if "attribute_not_exists(pk)" in ConditionExpression and existing is None:
                allowed = True
            if not allowed:
                raise conditional_failure("PutItem")
        self.items[item_key] = Item

    def query(self, *, KeyConditionExpression, Select="COUNT", **_kwargs):
        pk_value = None
        sk_prefix = ""
        for condition in KeyConditionExpression._values:  # type: ignore[attr-defined]
            key, value = condition._values  # type: ignore[attr-defined]
            if key.name == "pk":  # pragma: no branch - helper
                pk_value = value
            elif key.name == "sk":
                sk_prefix = value
        matching_keys = [
            key
            for key in sorted(self.items)
            if key[0] == pk_value and key[1].startswith(sk_prefix)
        ]
        items = [self.items[key] for key in matching_keys]
        if Select == "COUNT":
            return {"Count": len(items)}
        return {"Items": [item.copy() for item in items], "Count": len(items)}

    def delete_item(self, *, Key, ConditionExpression):
        del ConditionExpression  # pragma: no cover - unused in fake implementation
        item_key = (Key["pk"], Key["sk"])
        if item_key not in self.items:
            raise conditional_failure("DeleteItem")
        self.items.pop(item_key)


def build_storage() -> tuple[TournamentStorage, FakeTable]:
    table = FakeTable()
    return TournamentStorage(table), table


def sample_record(bracket=None) -> TournamentRecord:
    return TournamentRecord(
        tournament_id="spring-open",
        created_at="2024-01-01T00:00:00.000Z",
        bracket=bracket,
        status="in_progress" if bracket is not None else "not_started",
    )


def test_ensure_table_raises_when_missing():
    storage = TournamentStorage(None)
    with pytest.raises(RuntimeError):
        storage.ensure_table()


def test_open_table_without_name_returns_none():
    assert open_table(None) is None
    assert open_table("") is None


def test_record_round_trip(four_player_bracket):
    storage, table = build_storage()
    saved = storage.save_record(sample_record(four_player_bracket))

    assert saved.version == 1
    assert saved.last_saved is not None
    assert ("TOURNAMENT#spring-open", "BRACKET") in table.items

    restored = storage.get_record("spring-open")
    assert restored == saved
    assert restored.bracket == four_player_bracket


def test_missing_record_returns_none():
    storage, _ = build_storage()
    assert storage.get_record("nope") is None


def test_save_record_with_expected_version_bumps_version(four_player_bracket):
    storage, _ = build_storage()
    first = storage.save_record(sample_record(four_player_bracket), expected_version=0)
    assert first.version == 1

    first.bracket = apply_winner(four_player_bracket, "r1-m1", "p1")
    second = storage.save_record(first, expected_version=first.version)

    assert second.version == 2
    assert storage.get_record("spring-open").bracket == first.bracket


def test_save_record_detects_concurrent_writer(four_player_bracket):
    storage, _ = build_storage()
    first_save = storage.save_record(
        sample_record(four_player_bracket), expected_version=0
    )

    storage.save_record(first_save, expected_version=first_save.version)

    with pytest.raises(StaleBracketError):
        storage.save_record(first_save, expected_version=first_save.version)
    assert storage.get_record("spring-open").version == 2


def test_save_record_rejects_overwriting_new_tournament(four_player_bracket):
    storage, _ = build_storage()
    storage.save_record(sample_record(four_player_bracket))

    with pytest.raises(StaleBracketError):
        storage.save_record(sample_record(four_player_bracket), expected_version=0)


def test_save_record_reraises_unexpected_errors(four_player_bracket):
    class BrokenTable(FakeTable):
        def put_item(self, **_kwargs):
            raise ClientError(
                {"Error": {"Code": "ProvisionedThroughputExceededException"}},
                "PutItem",
            )

    storage = TournamentStorage(BrokenTable())
    with pytest.raises(ClientError):
        storage.save_record(sample_record(four_player_bracket))


def test_delete_record():
    storage, _ = build_storage()
    storage.save_record(sample_record())

    assert storage.delete_record("spring-open") is True
    assert storage.delete_record("spring-open") is False
    assert storage.get_record("spring-open") is None


def test_competitors_are_listed_by_seed(field_of):
    storage, _ = build_storage()
    for competitor in reversed(field_of(3)):
        storage.save_competitor("spring-open", competitor)
    storage.save_record(sample_record())

    listed = storage.list_competitors("spring-open")

    assert listed == field_of(3)
    assert storage.list_competitors("other") == []


def test_delete_competitors(field_of):
    storage, table = build_storage()
    for competitor in field_of(2):
        storage.save_competitor("spring-open", competitor)

    assert storage.delete_competitors("spring-open") == 2
    assert storage.list_competitors("spring-open") == []
    assert table.items == {}
