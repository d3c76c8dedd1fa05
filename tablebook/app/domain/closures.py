"""Closure registry queries.

Partial closure windows are inclusive at both ends: a slot that starts exactly
at a closure's ``end_time`` is still blocked.
"""
from collections.abc import Iterable
from datetime import date, time

from tablebook.app.domain.models import Closure


def window_overlap(closure: Closure, at: time) -> bool:
    """True when ``at`` falls inside the closure's window on its date."""
    if closure.all_day:
        return True
    return closure.start_time <= at <= closure.end_time


def closures_on(day: date, closures: Iterable[Closure]) -> list[Closure]:
    return [closure for closure in closures if closure.closure_date == day]


def blocking_closure(day: date, at: time, closures: Iterable[Closure]) -> Closure | None:
    """First closure on ``day`` that blocks ``at``, used to explain a closed slot."""
    for closure in closures_on(day, closures):
        if window_overlap(closure, at):
            return closure
    return None


def is_blocked(day: date, at: time, closures: Iterable[Closure]) -> bool:
    return blocking_closure(day, at, closures) is not None


def is_fully_closed(day: date, closures: Iterable[Closure]) -> bool:
    return any(closure.all_day for closure in closures_on(day, closures))
