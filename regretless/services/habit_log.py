"""
HabitLog — append-only record of logged sessions plus derived queries.

Calendar days are UTC days. Naive timestamps are read as UTC.
The log is kept in insertion order; it is not re-sorted, so queries never
assume the last element is the latest event.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator, Optional

from regretless.services.domain import HabitEvent, Mood, Trigger


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def event_day(ts: datetime) -> date:
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(timezone.utc).date()


def _as_aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def start_of_week(day: date) -> date:
    """Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


class HabitLog:
    def __init__(self, events: Optional[Iterable[HabitEvent]] = None):
        self._events: list[HabitEvent] = list(events or [])

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[HabitEvent]:
        return iter(self._events)

    @property
    def events(self) -> tuple[HabitEvent, ...]:
        return tuple(self._events)

    def append(self, event: HabitEvent) -> None:
        self._events.append(event)

    # --- counts ---

    def count_on_date(self, day: date) -> int:
        return sum(1 for e in self._events if event_day(e.timestamp) == day)

    def count_since(self, moment: datetime | date) -> int:
        return len(self.events_since(moment))

    def events_since(self, moment: datetime | date) -> list[HabitEvent]:
        if not isinstance(moment, datetime):
            moment = datetime.combine(moment, datetime.min.time(), tzinfo=timezone.utc)
        moment = _as_aware(moment)
        return [e for e in self._events if _as_aware(e.timestamp) >= moment]

    def count_this_week(self, today: Optional[date] = None) -> int:
        return self.count_since(start_of_week(today or _today()))

    # --- streak ---

    def consecutive_event_free_days_ending_today(self, today: Optional[date] = None) -> int:
        """
        Clean streak: days since the latest logged session, today included.

        - empty log             -> 1 (the whole history counts as clean)
        - a session today       -> 0 (counting resumes tomorrow)
        - latest N days ago     -> N + 1
        - latest in the future  -> 1
        """
        today = today or _today()
        if not self._events:
            return 1
        if self.count_on_date(today) > 0:
            return 0
        latest = max(event_day(e.timestamp) for e in self._events)
        if latest > today:
            return 1
        return (today - latest).days + 1

    # --- analytics ---

    def trigger_breakdown(self) -> dict[Trigger, int]:
        counts = {t: 0 for t in Trigger}
        for e in self._events:
            counts[e.trigger] += 1
        return counts

    def mood_breakdown(self) -> dict[Mood, int]:
        counts = {m: 0 for m in Mood}
        for e in self._events:
            counts[e.mood] += 1
        return counts
