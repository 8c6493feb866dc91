"""Tests for the state repository adapters."""

import json
from dataclasses import dataclass, field

import pytest

from mess_analyzer.adapters.json_file_state_repository import JsonFileStateRepository
from mess_analyzer.adapters.supabase_state_repository import SupabaseStateRepository
from mess_analyzer.domain.nutrition import MealTotals
from mess_analyzer.services.history import (
    DAILY_KEY,
    MEALS_KEY,
    HistoryStore,
    StateReadError,
)
from tests.conftest import FixedClock


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": []}
    )
    last_payload: object | None = None
    last_options: dict[str, object] = field(default_factory=dict)
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    executions: int = 0

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, **options) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_options = options
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        self.executions += 1
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_json_file_repository_missing_file_reads_empty(tmp_path) -> None:
    repository = JsonFileStateRepository(tmp_path / "state.json")

    assert repository.load(MEALS_KEY) is None


def test_json_file_repository_merges_writes(tmp_path) -> None:
    path = tmp_path / "nested" / "state.json"
    repository = JsonFileStateRepository(path)

    repository.save_many({"a": [1, 2], "b": {"x": 1}})
    repository.save_many({"b": {"y": 2}})

    assert repository.load("a") == [1, 2]
    assert repository.load("b") == {"y": 2}
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": [1, 2], "b": {"y": 2}}
    assert not (path.parent / "state.json.tmp").exists()


def test_json_file_repository_rejects_non_object(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(StateReadError):
        JsonFileStateRepository(path).load(MEALS_KEY)


def test_json_file_repository_reports_corrupt_json(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StateReadError, match="not valid JSON"):
        JsonFileStateRepository(path).load(MEALS_KEY)


def test_history_survives_reopening_file(tmp_path) -> None:
    path = tmp_path / "state.json"
    clock = FixedClock()
    first = HistoryStore(repository=JsonFileStateRepository(path), clock=clock)
    first.save_meal(["Idli", "Sambar"], MealTotals(calories=250, protein=8))

    reopened = HistoryStore(repository=JsonFileStateRepository(path), clock=clock)

    assert reopened.get_all_meals() == first.get_all_meals()
    assert reopened.get_daily_aggregates()["2024-03-15"].meal_count == 1


def test_supabase_state_repository_load() -> None:
    client = FakeSupabaseClient()
    table = client.table("app_state")
    table.queue("select", [{"value": [{"id": 1}]}])

    repository = SupabaseStateRepository(client)

    assert repository.load(MEALS_KEY) == [{"id": 1}]
    assert table.last_filters == [("key", MEALS_KEY)]
    assert repository.load(DAILY_KEY) is None


def test_supabase_state_repository_upserts_in_one_request() -> None:
    client = FakeSupabaseClient()
    table = client.table("app_state")
    repository = SupabaseStateRepository(client)

    repository.save_many({MEALS_KEY: [], DAILY_KEY: {}})

    assert table.executions == 1
    assert table.last_options == {"on_conflict": "key"}
    assert [row["key"] for row in table.last_payload] == [MEALS_KEY, DAILY_KEY]
    assert all("updated_at" in row for row in table.last_payload)


def test_supabase_state_repository_skips_empty_write() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseStateRepository(client)

    repository.save_many({})

    assert client.tables == {}
