"""
Durable key/value slots backing the registry and the dose log.

Key patterns:
- Protocol-based storage so the repository never knows where bytes live
- Result values for expected I/O failures instead of exceptions
- Atomic file replacement so a crash mid-write never truncates a slot
"""

from pathlib import Path
from typing import Generic, Protocol, TypeVar

import structlog

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit outcome of an operation whose failure is expected.

    A missing or unreadable slot is ordinary for a first run, so reads report
    it as a value the caller must inspect rather than raising.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class SlotStorage(Protocol):
    """
    Two-method contract for a named durable slot.

    ``read`` yields the stored payload or an error (absent slots are errors).
    Payloads are not decoded here; the repository validates them as JSON.
    ``write`` replaces the whole slot and yields the number of characters written.
    """

    def read(self, key: str) -> Result[str | bytes, OSError]: ...

    def write(self, key: str, payload: str) -> Result[int, OSError]: ...


class InMemoryStorage:
    """Process-local slots, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.slots: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Result[str | bytes, OSError]:
        if key not in self.slots:
            return Result.err(FileNotFoundError(f"slot {key!r} is empty"))
        return Result.ok(self.slots[key])

    def write(self, key: str, payload: str) -> Result[int, OSError]:
        self.slots[key] = payload
        return Result.ok(len(payload))


class JsonFileStorage:
    """
    One ``<key>.json`` file per slot inside a data directory.

    Writes go to a sibling temp file first and are moved into place with
    ``Path.replace``.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.logger = logger.bind(directory=str(self.directory))

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Result[str | bytes, OSError]:
        path = self.path_for(key)
        try:
            return Result.ok(path.read_bytes())
        except OSError as e:
            self.logger.debug("slot_read_failed", key=key, error=str(e))
            return Result.err(e)

    def write(self, key: str, payload: str) -> Result[int, OSError]:
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            self.logger.error("slot_write_failed", key=key, error=str(e))
            return Result.err(e)
        self.logger.debug("slot_written", key=key, size=len(payload))
        return Result.ok(len(payload))
