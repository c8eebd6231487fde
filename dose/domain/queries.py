"""Query primitives over the dose log.

Every higher-level statistic is built on :func:`count_for_day`. Results keep
the log's insertion order, which is chronological.
"""

from collections.abc import Iterable

from dose.domain.models import DoseEvent


def count_for_day(events: Iterable[DoseEvent], medication_id: int, day: str) -> int:
    return sum(1 for e in events if e.medication_id == medication_id and e.date_key == day)


def events_for_day(events: Iterable[DoseEvent], day: str) -> list[DoseEvent]:
    return [e for e in events if e.date_key == day]


def events_for_medication_and_day(
    events: Iterable[DoseEvent], medication_id: int, day: str
) -> list[DoseEvent]:
    return [e for e in events if e.medication_id == medication_id and e.date_key == day]
