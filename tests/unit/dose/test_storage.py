"""
Tests for the persistence slots and the repository built on them.

Covers:
- Result ok/err semantics
- In-memory and JSON file slots
- Round-trip fidelity of both collections
- Fallback to defaults for absent or corrupt slots
- Independence of the two slots
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import LOCAL_NOON
from dose.domain.models import DoseEvent, Medication, seed_medications
from dose.services.repository import DoseRepository
from dose.services.storage import InMemoryStorage, JsonFileStorage, Result
from dose.services.tracker import DoseTracker


class TestResult:
    def test_ok_result(self) -> None:
        result: Result[str, OSError] = Result.ok("payload")
        assert result.is_ok()
        assert result.unwrap() == "payload"

    def test_err_result_raises_on_unwrap(self) -> None:
        result: Result[str, OSError] = Result.err(FileNotFoundError("missing"))
        assert result.is_err()
        assert isinstance(result.unwrap_err(), FileNotFoundError)
        with pytest.raises(FileNotFoundError, match="missing"):
            result.unwrap()

    def test_empty_string_is_a_valid_value(self) -> None:
        assert Result.ok("").is_ok()

    def test_cannot_hold_both(self) -> None:
        with pytest.raises(ValueError):
            Result(value="x", error=OSError("y"))


class TestInMemoryStorage:
    def test_absent_slot_is_an_error(self) -> None:
        assert InMemoryStorage().read("nothing").is_err()

    def test_write_then_read(self) -> None:
        storage = InMemoryStorage()
        assert storage.write("k", "[]").unwrap() == 2
        assert storage.read("k").unwrap() == "[]"


class TestJsonFileStorage:
    def test_write_creates_directory_and_file(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path / "nested")
        assert storage.write("dose_meds", "[]").is_ok()
        assert (tmp_path / "nested" / "dose_meds.json").read_text(encoding="utf-8") == "[]"

    def test_no_temp_file_left_behind(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path)
        storage.write("dose_logs", "[]")
        assert [p.name for p in tmp_path.iterdir()] == ["dose_logs.json"]

    def test_missing_file_is_an_error(self, tmp_path: Path) -> None:
        result = JsonFileStorage(tmp_path).read("dose_meds")
        assert result.is_err()
        assert isinstance(result.unwrap_err(), FileNotFoundError)

    def test_read_returns_raw_bytes(self, tmp_path: Path) -> None:
        (tmp_path / "dose_logs.json").write_bytes(b"\xff\xfe")
        assert JsonFileStorage(tmp_path).read("dose_logs").unwrap() == b"\xff\xfe"

    def test_unwritable_directory_reports_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        assert JsonFileStorage(blocker).write("dose_meds", "[]").is_err()


class TestDoseRepository:
    def test_absent_slots_fall_back_to_defaults(self) -> None:
        repository = DoseRepository(InMemoryStorage())
        assert repository.load_medications() == seed_medications()
        assert repository.load_events() == []

    def test_seed_list_contents(self) -> None:
        names = [(m.name, m.frequency, m.unit) for m in seed_medications()]
        assert names == [("Vitamin C", 1, "tab"), ("Omega-3", 2, "gel")]

    def test_round_trip_is_field_for_field(self, tmp_path: Path) -> None:
        repository = DoseRepository(JsonFileStorage(tmp_path))
        medications = [
            Medication(id=5, name="Metformin", frequency=2, unit="tab"),
            Medication(id=9, name="Insulin", frequency=3, unit="iu"),
        ]
        events = [
            DoseEvent(id=11, medication_id=5, timestamp=LOCAL_NOON, date_key="2024-06-12"),
            DoseEvent(id=12, medication_id=404, timestamp=LOCAL_NOON, date_key="2024-06-11"),
        ]

        assert repository.save_medications(medications)
        assert repository.save_events(events)

        reloaded = DoseRepository(JsonFileStorage(tmp_path))
        assert reloaded.load_medications() == medications
        assert reloaded.load_events() == events
        assert reloaded.load_events()[0].timestamp == LOCAL_NOON

    def test_saved_slot_is_a_list_of_records(self) -> None:
        storage = InMemoryStorage()
        DoseRepository(storage).save_medications(seed_medications())
        records = json.loads(storage.slots["dose_meds"])
        assert records[0] == {"id": 1, "name": "Vitamin C", "frequency": 1, "unit": "tab"}

    @pytest.mark.parametrize(
        "payload",
        [
            "{not json",
            "",
            '{"id": 1}',
            '[{"id": 1, "name": "", "frequency": 1, "unit": "x"}]',
            '[{"id": 1, "name": "A", "frequency": 0, "unit": "x"}]',
        ],
    )
    def test_corrupt_medication_slot_uses_seed_list(self, payload: str) -> None:
        repository = DoseRepository(InMemoryStorage({"dose_meds": payload}))
        assert repository.load_medications() == seed_medications()

    def test_undecodable_slot_files_fall_back_to_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "dose_meds.json").write_bytes(b"\xff\xfe[garbage")
        (tmp_path / "dose_logs.json").write_bytes(b"\x80\x81")

        tracker = DoseTracker(DoseRepository(JsonFileStorage(tmp_path)))

        assert tracker.list_medications() == seed_medications()
        assert tracker.list_events() == []

    def test_corrupt_event_slot_uses_empty_log(self) -> None:
        bad = '[{"id": 1, "medication_id": 1, "timestamp": "later", "date_key": "today"}]'
        repository = DoseRepository(InMemoryStorage({"dose_logs": bad}))
        assert repository.load_events() == []

    def test_slots_are_independent(self) -> None:
        storage = InMemoryStorage({"dose_meds": "garbage", "dose_logs": "[]"})
        repository = DoseRepository(storage)
        repository.save_events(
            [DoseEvent(id=3, medication_id=77, timestamp=LOCAL_NOON, date_key="2024-06-12")]
        )

        assert repository.load_medications() == seed_medications()
        assert [e.medication_id for e in repository.load_events()] == [77]

    def test_custom_slot_keys(self) -> None:
        storage = InMemoryStorage()
        repository = DoseRepository(storage, medications_key="meds", events_key="doses")
        repository.save_medications([])
        repository.save_events([])
        assert set(storage.slots) == {"meds", "doses"}

    def test_failed_save_is_reported(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        assert DoseRepository(JsonFileStorage(blocker)).save_medications([]) is False
