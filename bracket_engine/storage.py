from __future__ import annotations

import logging
from dataclasses import replace

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from .models import Competitor, CompetitorEntry, TournamentRecord, utc_now_iso
from .validation import StaleBracketError

log = logging.getLogger(__name__)

_CONDITION_FAILED = "ConditionalCheckFailedException"


def _error_code(exc: ClientError) -> str | None:
    return exc.response.get("Error", {}).get("Code")


def open_table(table_name: str | None, *, region_name: str | None = None):
    """Return the DynamoDB table resource, or None when no table is configured."""
    if not table_name:
        return None
    return boto3.resource("dynamodb", region_name=region_name).Table(table_name)


class TournamentStorage:
    def __init__(self, table) -> None:
        self._table = table

    def ensure_table(self) -> None:
        if self._table is None:
            raise RuntimeError("Tournament table is not configured")

    # ----- Bracket records -----
    def get_record(self, tournament_id: str) -> TournamentRecord | None:
        self.ensure_table()
        resp = self._table.get_item(Key=TournamentRecord.key(tournament_id))
        item = resp.get("Item")
        if not item:
            return None
        return TournamentRecord.from_item(item)

    def save_record(
        self, record: TournamentRecord, *, expected_version: int | None = None
    ) -> TournamentRecord:
        """Write ``record`` and return the stored copy with its new version.

        With ``expected_version`` the write only succeeds if the stored record
        still carries that version; a brand new record expects version 0.
        """
        self.ensure_table()
        base_version = (
            record.version if expected_version is None else expected_version
        )
        saved = replace(record, version=base_version + 1, last_saved=utc_now_iso())
        kwargs: dict[str, object] = {"Item": saved.to_item()}
        if expected_version is not None:
            kwargs["ConditionExpression"] = (
                "attribute_not_exists(pk) OR version = :expected"
                if expected_version == 0
                else "version = :expected"
            )
            kwargs["ExpressionAttributeValues"] = {":expected": expected_version}
        try:
            self._table.put_item(**kwargs)
        except ClientError as exc:
            if _error_code(exc) == _CONDITION_FAILED:
                log.warning(
                    "Bracket %s changed since version %s",
                    record.tournament_id,
                    expected_version,
                )
                raise StaleBracketError(
                    f"Tournament {record.tournament_id} was modified concurrently"
                ) from exc
            raise
        return saved

    def delete_record(self, tournament_id: str) -> bool:
        self.ensure_table()
        try:
            self._table.delete_item(
                Key=TournamentRecord.key(tournament_id),
                ConditionExpression="attribute_exists(pk)",
            )
        except ClientError as exc:
            if _error_code(exc) == _CONDITION_FAILED:
                return False
            raise
        return True

    # ----- Competitors -----
    def save_competitor(self, tournament_id: str, competitor: Competitor) -> None:
        self.ensure_table()
        entry = CompetitorEntry(tournament_id=tournament_id, competitor=competitor)
        self._table.put_item(Item=entry.to_item())

    def list_competitors(self, tournament_id: str) -> list[Competitor]:
        self.ensure_table()
        resp = self._table.query(
            KeyConditionExpression=Key("pk").eq(
                CompetitorEntry.PK_TEMPLATE % tournament_id
            )
            & Key("sk").begins_with("COMPETITOR#"),
            Select="ALL_ATTRIBUTES",
        )
        entries = [CompetitorEntry.from_item(item) for item in resp.get("Items", [])]
        entries.sort(
            key=lambda entry: (
                entry.competitor.seed is None,
                entry.competitor.seed or 0,
                entry.added_at,
            )
        )
        return [entry.competitor for entry in entries]

    def delete_competitors(self, tournament_id: str) -> int:
        competitors = self.list_competitors(tournament_id)
        for competitor in competitors:
            self._table.delete_item(
                Key=CompetitorEntry.key(tournament_id, competitor.competitor_id),
                ConditionExpression="attribute_exists(pk)",
            )
        return len(competitors)


__all__ = ["TournamentStorage", "open_table"]
