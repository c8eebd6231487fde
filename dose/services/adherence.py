"""
Adherence statistics derived from the registry and the dose log.

Every function here is pure: it takes a snapshot of medications and events
and recomputes from scratch. Nothing is cached and nothing is persisted, so
the same inputs always give the same answer.

Percentages round half up (12.5 -> 13) using integer arithmetic.
"""

from collections.abc import Sequence
from datetime import date, datetime

from dose.domain.dates import last_days, local_now, parse_date_key, today_key
from dose.domain.models import AdviceTier, DailyCount, DoseEvent, Medication, MedicationStats
from dose.domain.queries import count_for_day

DEFAULT_WINDOW_DAYS = 7
DEFAULT_ON_TARGET_THRESHOLD = 80


def percent(numerator: int, denominator: int) -> int:
    """``round(100 * numerator / denominator)`` half up; 0 for a zero denominator."""
    if denominator <= 0:
        return 0
    scaled = 100 * numerator
    return (2 * scaled + denominator) // (2 * denominator)


def _resolve_day(day: str | date | datetime | None) -> date:
    if day is None:
        return local_now().date()
    if isinstance(day, datetime):
        return (day.astimezone() if day.tzinfo is not None else day).date()
    if isinstance(day, date):
        return day
    return parse_date_key(day)


def today_count(
    medication: Medication, events: Sequence[DoseEvent], today: str | None = None
) -> int:
    return count_for_day(events, medication.id, today if today is not None else today_key())


def is_complete(
    medication: Medication, events: Sequence[DoseEvent], today: str | None = None
) -> bool:
    return today_count(medication, events, today) >= medication.frequency


def today_completion(
    medications: Sequence[Medication], events: Sequence[DoseEvent], today: str | None = None
) -> int:
    """
    Share of today's combined target that has been logged, as a percentage.

    Only events for registered medications count. With no medications the
    denominator is treated as 1, which yields 0.
    """
    today = today if today is not None else today_key()
    registered = {m.id for m in medications}
    taken = sum(1 for e in events if e.date_key == today and e.medication_id in registered)
    target = sum(m.frequency for m in medications) or 1
    return percent(taken, target)


def weekly_history(
    medication: Medication,
    events: Sequence[DoseEvent],
    reference_date: str | date | datetime | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[DailyCount]:
    """
    Dose counts for ``window_days`` contiguous days ending at ``reference_date``.

    Oldest day first. Days without events are present with a zero count.
    """
    days = last_days(_resolve_day(reference_date), window_days)
    return [
        DailyCount(date_key=day, count=count_for_day(events, medication.id, day)) for day in days
    ]


def total_taken(daily_history: Sequence[DailyCount]) -> int:
    return sum(d.count for d in daily_history)


def adherence_rate(medication: Medication, daily_history: Sequence[DailyCount]) -> int:
    """Taken doses over ``frequency * window`` as a rounded percentage."""
    return percent(total_taken(daily_history), medication.frequency * len(daily_history))


def classify_advice(
    taken: int, rate: int, on_target_threshold: int = DEFAULT_ON_TARGET_THRESHOLD
) -> AdviceTier:
    if taken == 0:
        return AdviceTier.NO_RECORDS
    if rate < on_target_threshold:
        return AdviceTier.NEEDS_IMPROVEMENT
    if rate <= 100:
        return AdviceTier.ON_TARGET
    return AdviceTier.OVER_TARGET


def medication_stats(
    medication: Medication,
    events: Sequence[DoseEvent],
    reference_date: str | date | datetime | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    on_target_threshold: int = DEFAULT_ON_TARGET_THRESHOLD,
) -> MedicationStats:
    history = weekly_history(medication, events, reference_date, window_days)
    taken = total_taken(history)
    rate = adherence_rate(medication, history)
    return MedicationStats(
        medication=medication,
        daily_history=history,
        total_taken=taken,
        adherence_rate=rate,
        tier=classify_advice(taken, rate, on_target_threshold),
    )


def weekly_report(
    medications: Sequence[Medication],
    events: Sequence[DoseEvent],
    reference_date: str | date | datetime | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    on_target_threshold: int = DEFAULT_ON_TARGET_THRESHOLD,
) -> list[MedicationStats]:
    """Per-medication stats in registry order."""
    day = _resolve_day(reference_date)
    return [
        medication_stats(m, events, day, window_days, on_target_threshold) for m in medications
    ]
