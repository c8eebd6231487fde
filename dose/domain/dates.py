"""Local-calendar date helpers.

Day boundaries always come from the machine's local time zone.
"""

from datetime import date, datetime, timedelta


def local_now() -> datetime:
    """Current instant as an aware datetime in the local time zone."""
    return datetime.now().astimezone()


def date_key(moment: datetime | date) -> str:
    """Calendar-day bucket (YYYY-MM-DD) for a datetime or date."""
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone()
        moment = moment.date()
    return moment.isoformat()


def today_key(now: datetime | None = None) -> str:
    return date_key(now if now is not None else local_now())


def parse_date_key(key: str) -> date:
    return date.fromisoformat(key)


def last_days(reference: date, days: int) -> list[str]:
    """Contiguous day keys ending at ``reference``, oldest first."""
    return [date_key(reference - timedelta(days=offset)) for offset in range(days - 1, -1, -1)]
