from __future__ import annotations
from uuid import UUID


class LeagueConfigError(Exception):
    """League is missing or its settings are outside the allowed bounds."""

    def __init__(self, league_id: UUID, message: str):
        super().__init__(f"league {league_id}: {message}")
        self.league_id = league_id


class Rejected(Exception):
    """Synchronous validation failure with a stable reason code."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    def detail(self) -> dict:
        return {"reason": self.reason, "message": self.message}


class BallotRejected(Rejected):
    pass


class ResponseRejected(Rejected):
    pass


class QueueError(Rejected):
    pass


class TransitionConflict(Exception):
    """Another process already moved the prompt; callers treat this as a no-op."""
