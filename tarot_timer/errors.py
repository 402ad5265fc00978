"""Error kinds raised by the draw engine, sessions and data loaders.

All of them are recoverable by the caller. The HTTP layer maps ``status_code``
and ``code`` onto the response.
"""

from __future__ import annotations


class TarotTimerError(RuntimeError):
    code = "tarot_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CatalogError(TarotTimerError):
    """Malformed deck or spread data file."""

    code = "catalog_error"
    status_code = 500


class EmptyDeckError(TarotTimerError):
    """No eligible card is left after applying the exclusion set."""

    code = "empty_deck"
    status_code = 409


class InsufficientDeckError(TarotTimerError):
    code = "insufficient_deck"
    status_code = 409


class InvalidPositionError(TarotTimerError):
    code = "invalid_position"
    status_code = 400


class LayoutNotFoundError(TarotTimerError):
    code = "layout_not_found"
    status_code = 404


class DeckNotFoundError(TarotTimerError):
    code = "deck_not_found"
    status_code = 404


class SessionNotActiveError(TarotTimerError):
    code = "session_not_active"
    status_code = 409


class TimelineUnsupportedError(TarotTimerError):
    code = "timeline_unsupported"
    status_code = 400


class SessionNotFoundError(TarotTimerError):
    code = "session_not_found"
    status_code = 404


class SessionVersionConflictError(TarotTimerError):
    code = "version_conflict"
    status_code = 409


class SnapshotError(TarotTimerError):
    """Snapshot that would break session invariants if restored."""

    code = "invalid_snapshot"
    status_code = 400
