from __future__ import annotations
from datetime import datetime, timedelta
from typing import NamedTuple, Protocol
from app.models.prompt import SCHEDULED, ACTIVE, VOTING, COMPLETED
from app.services.clock import as_utc


class PhaseDurations(Protocol):
    submission_days: int
    voting_days: int


class PromptPhase(Protocol):
    status: str
    phase_started_at: datetime | None


class TimeRemaining(NamedTuple):
    days: int
    hours: int
    minutes: int
    is_expired: bool


_NEXT = {SCHEDULED: ACTIVE, ACTIVE: VOTING, VOTING: COMPLETED, COMPLETED: None}


def next_phase(status: str) -> str | None:
    """Return the status that follows `status`, or None once COMPLETED."""
    if status not in _NEXT:
        raise ValueError(f"unknown prompt status: {status!r}")
    return _NEXT[status]


def phase_duration(status: str, settings: PhaseDurations) -> timedelta | None:
    if status == ACTIVE:
        return timedelta(days=settings.submission_days)
    if status == VOTING:
        return timedelta(days=settings.voting_days)
    return None


def phase_end_time(prompt: PromptPhase, settings: PhaseDurations) -> datetime | None:
    """
    When the prompt's current phase ends (UTC).

    Only ACTIVE and VOTING phases are timed; SCHEDULED and COMPLETED prompts,
    and prompts never activated, have no end.

    Examples:
        >>> from types import SimpleNamespace as NS
        >>> from datetime import datetime, timezone
        >>> p = NS(status="ACTIVE", phase_started_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
        >>> phase_end_time(p, NS(submission_days=7, voting_days=2)).isoformat()
        '2025-01-08T00:00:00+00:00'
    """
    started = as_utc(prompt.phase_started_at)
    if started is None:
        return None
    duration = phase_duration(prompt.status, settings)
    if duration is None:
        return None
    return started + duration


def is_expired(prompt: PromptPhase, settings: PhaseDurations, now: datetime) -> bool:
    end = phase_end_time(prompt, settings)
    if end is None:
        return False
    return as_utc(now) >= end


def is_submission_open(prompt: PromptPhase, settings: PhaseDurations, now: datetime) -> bool:
    return prompt.status == ACTIVE and not is_expired(prompt, settings, now)


def is_voting_open(prompt: PromptPhase, settings: PhaseDurations, now: datetime) -> bool:
    return prompt.status == VOTING and not is_expired(prompt, settings, now)


def time_until_phase_end(prompt: PromptPhase, settings: PhaseDurations, now: datetime) -> TimeRemaining:
    """Countdown to the end of the current phase; untimed phases read as expired."""
    end = phase_end_time(prompt, settings)
    if end is None:
        return TimeRemaining(0, 0, 0, True)
    remaining = end - as_utc(now)
    if remaining <= timedelta(0):
        return TimeRemaining(0, 0, 0, True)
    secs = int(remaining.total_seconds())
    return TimeRemaining(secs // 86400, (secs % 86400) // 3600, (secs % 3600) // 60, False)
