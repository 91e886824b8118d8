from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


class StateError(Protocol):
    def __call__(self, *, status: str, transition: str) -> Exception: ...


class StatefulRecord(Protocol):
    status: str
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class StatusTransition:
    name: str
    from_statuses: frozenset[str]
    to_status: str
    error: StateError

    def allows(self, status: str) -> bool:
        return status in self.from_statuses

    def ensure_allowed(self, status: str) -> None:
        if not self.allows(status):
            raise self.error(status=status, transition=self.name)


def apply_transition(
    record: StatefulRecord,
    transition: StatusTransition,
    *,
    now_utc: datetime,
) -> None:
    transition.ensure_allowed(record.status)
    record.status = transition.to_status
    record.updated_at = now_utc
