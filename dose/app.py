"""
Wiring between configuration, storage and the calculator.

The presentation layer is expected to hold a :class:`DoseTracker` from
:func:`open_tracker` for mutations and to feed its snapshots into the
helpers below for everything it displays.
"""

from dose.config import AppConfig, get_config
from dose.domain.dates import local_now
from dose.domain.models import MedicationStats
from dose.services import adherence
from dose.services.repository import DoseRepository
from dose.services.storage import JsonFileStorage, SlotStorage
from dose.services.tracker import Clock, DoseTracker, NoticeHandler


def open_tracker(
    config: AppConfig | None = None,
    storage: SlotStorage | None = None,
    clock: Clock = local_now,
    on_notice: NoticeHandler | None = None,
) -> DoseTracker:
    """Load a tracker from the configured data directory (or ``storage``)."""
    config = config or get_config()
    repository = DoseRepository(
        storage or JsonFileStorage(config.storage.data_dir),
        medications_key=config.storage.medications_key,
        events_key=config.storage.events_key,
    )
    return DoseTracker(repository, clock=clock, on_notice=on_notice)


def today_completion(tracker: DoseTracker) -> int:
    snapshot = tracker.snapshot()
    return adherence.today_completion(snapshot.medications, snapshot.events, tracker.today())


def weekly_insights(tracker: DoseTracker, config: AppConfig | None = None) -> list[MedicationStats]:
    """Rolling-window stats for every registered medication, ending today."""
    config = config or get_config()
    snapshot = tracker.snapshot()
    return adherence.weekly_report(
        snapshot.medications,
        snapshot.events,
        reference_date=tracker.today(),
        window_days=config.adherence.window_days,
        on_target_threshold=config.adherence.on_target_threshold,
    )
