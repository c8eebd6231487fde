"""
Stateful owner of the medication registry and the dose log.

Design principles:
- The tracker is the only writer of both collections
- Every effective mutation is written through to its slot immediately
- Forgiving input: bad names are ignored, bad frequencies are corrected,
  unknown ids are no-ops
- Callers read through immutable snapshots, never through live lists
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from dose.domain import queries
from dose.domain.dates import date_key, local_now
from dose.domain.models import DEFAULT_UNIT, DoseEvent, Medication, Notice
from dose.services.repository import DoseRepository

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]
NoticeHandler = Callable[[Notice], None]


def coerce_frequency(value: Any) -> int:
    """Integer-parse ``value``; anything unusable or below 1 becomes 1."""
    if isinstance(value, bool):
        return 1
    try:
        frequency = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return frequency if frequency >= 1 else 1


def coerce_unit(value: Any) -> str:
    """Stripped label, or the default when ``value`` is not a non-blank string."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_UNIT


class IdGenerator:
    """Millisecond clock ids, strictly increasing across every entity."""

    def __init__(self, clock: Clock, floor: int = 0) -> None:
        self._clock = clock
        self._last = floor

    def advance_past(self, ids: Iterable[int]) -> None:
        self._last = max([self._last, *ids])

    def __call__(self) -> int:
        candidate = int(self._clock().timestamp() * 1000)
        self._last = max(candidate, self._last + 1)
        return self._last


@dataclass(frozen=True)
class TrackerSnapshot:
    """Read-only view of the tracker state at one point in time."""

    medications: tuple[Medication, ...]
    events: tuple[DoseEvent, ...]


class DoseTracker:
    """
    Registry and dose log operations backed by a :class:`DoseRepository`.

    State is loaded once at construction. The clock is injectable so that
    "today" can be pinned in tests.
    """

    def __init__(
        self,
        repository: DoseRepository,
        clock: Clock = local_now,
        on_notice: NoticeHandler | None = None,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.on_notice = on_notice
        self.logger = logger.bind(component="dose_tracker")

        self._medications: list[Medication] = repository.load_medications()
        self._events: list[DoseEvent] = repository.load_events()
        self._next_id = IdGenerator(clock)
        self._next_id.advance_past(m.id for m in self._medications)
        self._next_id.advance_past(e.id for e in self._events)

        self.logger.info(
            "tracker_loaded", medications=len(self._medications), events=len(self._events)
        )

    # Registry

    def add_medication(
        self, name: str, frequency: Any = 1, unit: Any = DEFAULT_UNIT
    ) -> Medication | None:
        """Append a medication; returns ``None`` when ``name`` is blank."""
        cleaned = name.strip() if isinstance(name, str) else ""
        if not cleaned:
            self.logger.debug("medication_rejected", reason="empty_name")
            return None

        medication = Medication(
            id=self._next_id(),
            name=cleaned,
            frequency=coerce_frequency(frequency),
            unit=coerce_unit(unit),
        )
        self._medications.append(medication)
        self.repository.save_medications(self._medications)
        self.logger.info(
            "medication_added", medication_id=medication.id, frequency=medication.frequency
        )
        self._notify(Notice.ADDED)
        return medication

    def remove_medication(self, medication_id: int) -> bool:
        """Drop a medication. Its dose events are kept as orphans."""
        remaining = [m for m in self._medications if m.id != medication_id]
        if len(remaining) == len(self._medications):
            return False

        self._medications = remaining
        self.repository.save_medications(self._medications)
        self.logger.info("medication_removed", medication_id=medication_id)
        self._notify(Notice.REMOVED)
        return True

    def list_medications(self) -> list[Medication]:
        return list(self._medications)

    def get_medication(self, medication_id: int) -> Medication | None:
        return next((m for m in self._medications if m.id == medication_id), None)

    # Dose log

    def log_dose(self, medication_id: int) -> DoseEvent:
        """Record a dose taken now. Unknown medication ids are accepted."""
        now = self.clock()
        event = DoseEvent(
            id=self._next_id(), medication_id=medication_id, timestamp=now, date_key=date_key(now)
        )
        self._events.append(event)
        self.repository.save_events(self._events)
        self.logger.info(
            "dose_logged", event_id=event.id, medication_id=medication_id, day=event.date_key
        )
        self._notify(Notice.DOSE_LOGGED)
        return event

    def delete_dose_event(self, event_id: int) -> bool:
        remaining = [e for e in self._events if e.id != event_id]
        if len(remaining) == len(self._events):
            return False

        self._events = remaining
        self.repository.save_events(self._events)
        self.logger.info("dose_undone", event_id=event_id)
        self._notify(Notice.UNDONE)
        return True

    def list_events(self) -> list[DoseEvent]:
        return list(self._events)

    def count_for_day(self, medication_id: int, day: str) -> int:
        return queries.count_for_day(self._events, medication_id, day)

    def events_for_day(self, day: str) -> list[DoseEvent]:
        return queries.events_for_day(self._events, day)

    def events_for_medication_and_day(self, medication_id: int, day: str) -> list[DoseEvent]:
        return queries.events_for_medication_and_day(self._events, medication_id, day)

    def today(self) -> str:
        return date_key(self.clock())

    def snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(medications=tuple(self._medications), events=tuple(self._events))

    def _notify(self, notice: Notice) -> None:
        if self.on_notice is not None:
            self.on_notice(notice)
