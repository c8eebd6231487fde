"""
Domain models for medication tracking.

These models represent the core business concepts and are framework-agnostic.
They are frozen pydantic models: a medication or dose event never changes once
created, it is only added or removed.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_UNIT = "x"


class AdviceTier(str, Enum):
    """Weekly adherence classification, first match wins."""

    NO_RECORDS = "no_records"
    NEEDS_IMPROVEMENT = "needs_improvement"
    ON_TARGET = "on_target"
    OVER_TARGET = "over_target"


ADVICE_MESSAGES: dict[AdviceTier, str] = {
    AdviceTier.NO_RECORDS: "No records yet.",
    AdviceTier.NEEDS_IMPROVEMENT: "Consistency is key.",
    AdviceTier.ON_TARGET: "Perfect streak.",
    AdviceTier.OVER_TARGET: "Over limit?",
}


class Notice(str, Enum):
    """Acknowledgements emitted after a mutation took effect."""

    ADDED = "added"
    REMOVED = "removed"
    DOSE_LOGGED = "dose_logged"
    UNDONE = "undone"


NOTICE_MESSAGES: dict[Notice, str] = {
    Notice.ADDED: "Added successfully",
    Notice.REMOVED: "Removed",
    Notice.DOSE_LOGGED: "Dose logged",
    Notice.UNDONE: "Undone",
}


class Medication(BaseModel):
    """A recurring medication with a daily dose target."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = Field(min_length=1)
    frequency: int = Field(gt=0, description="Target doses per calendar day")
    unit: str = Field(default=DEFAULT_UNIT, description="Cosmetic label, e.g. 'tab'")


class DoseEvent(BaseModel):
    """A single dose taken, bucketed into the local day it was logged on."""

    model_config = ConfigDict(frozen=True)

    id: int
    medication_id: int = Field(description="Weak reference, may outlive the medication")
    timestamp: datetime
    date_key: str = Field(
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Local calendar day (YYYY-MM-DD) fixed at creation",
    )


class DailyCount(BaseModel):
    """Doses taken for one medication on one calendar day."""

    model_config = ConfigDict(frozen=True)

    date_key: str
    count: int = Field(ge=0)


class MedicationStats(BaseModel):
    """Rolling-window adherence summary for a single medication."""

    model_config = ConfigDict(frozen=True)

    medication: Medication
    daily_history: list[DailyCount]
    total_taken: int = Field(ge=0)
    adherence_rate: int = Field(ge=0)
    tier: AdviceTier

    @property
    def advice(self) -> str:
        return ADVICE_MESSAGES[self.tier]


def seed_medications() -> list[Medication]:
    """Starter registry used when nothing usable has been stored yet."""
    return [
        Medication(id=1, name="Vitamin C", frequency=1, unit="tab"),
        Medication(id=2, name="Omega-3", frequency=2, unit="gel"),
    ]
