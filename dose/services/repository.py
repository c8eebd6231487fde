"""
Serialization of the registry and the dose log into their storage slots.

Each collection lives in its own slot as a JSON list of records. Loading never
fails: an absent, unreadable or invalid slot is replaced by its default and
the problem is logged. No referential repair runs between the two slots.
"""

from collections.abc import Callable, Sequence
from typing import TypeVar

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from dose.domain.models import DoseEvent, Medication, seed_medications
from dose.services.storage import SlotStorage

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_medications_adapter = TypeAdapter(list[Medication])
_events_adapter = TypeAdapter(list[DoseEvent])

DEFAULT_MEDICATIONS_KEY = "dose_meds"
DEFAULT_EVENTS_KEY = "dose_logs"


def dump_medications(medications: Sequence[Medication]) -> str:
    return _medications_adapter.dump_json(list(medications)).decode("utf-8")


def dump_events(events: Sequence[DoseEvent]) -> str:
    return _events_adapter.dump_json(list(events)).decode("utf-8")


def parse_medications(payload: str | bytes) -> list[Medication]:
    """Raises ``ValidationError`` on malformed JSON or records."""
    return _medications_adapter.validate_json(payload)


def parse_events(payload: str | bytes) -> list[DoseEvent]:
    """Raises ``ValidationError`` on malformed JSON or records."""
    return _events_adapter.validate_json(payload)


class DoseRepository:
    """Loads and saves the two collections through a :class:`SlotStorage`."""

    def __init__(
        self,
        storage: SlotStorage,
        medications_key: str = DEFAULT_MEDICATIONS_KEY,
        events_key: str = DEFAULT_EVENTS_KEY,
    ) -> None:
        self.storage = storage
        self.medications_key = medications_key
        self.events_key = events_key
        self.logger = logger.bind(component="dose_repository")

    def load_medications(self) -> list[Medication]:
        return self._load(self.medications_key, parse_medications, seed_medications)

    def load_events(self) -> list[DoseEvent]:
        return self._load(self.events_key, parse_events, list)

    def save_medications(self, medications: Sequence[Medication]) -> bool:
        return self._save(self.medications_key, dump_medications(medications), len(medications))

    def save_events(self, events: Sequence[DoseEvent]) -> bool:
        return self._save(self.events_key, dump_events(events), len(events))

    def _load(
        self,
        key: str,
        parse: Callable[[str | bytes], list[ModelT]],
        default: Callable[[], list[ModelT]],
    ) -> list[ModelT]:
        result = self.storage.read(key)
        if result.is_err():
            self.logger.info("slot_unavailable", key=key, error=str(result.unwrap_err()))
            return default()

        try:
            records = parse(result.unwrap())
        except ValidationError as e:
            self.logger.warning("slot_corrupt", key=key, errors=e.error_count())
            return default()

        self.logger.info("slot_loaded", key=key, count=len(records))
        return records

    def _save(self, key: str, payload: str, count: int) -> bool:
        result = self.storage.write(key, payload)
        if result.is_err():
            self.logger.warning("slot_save_failed", key=key, error=str(result.unwrap_err()))
            return False
        self.logger.debug("slot_saved", key=key, count=count)
        return True
