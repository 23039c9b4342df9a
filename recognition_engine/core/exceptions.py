"""
Application-level exceptions.

Every failure the results job can report maps to one subclass of
RecognitionEngineError, each with a stable error code for the API and CLI.
"""

from __future__ import annotations

from typing import Any


class RecognitionEngineError(Exception):
    """Base error; carries a machine-readable code and a user-visible message."""

    code = "recognition_engine_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "error": self.message}


class ConfigurationError(RecognitionEngineError):
    """Missing cycle_id or unknown cycle. Raised before any read or write."""

    code = "configuration_error"


class DataIntegrityError(RecognitionEngineError):
    """Cycle has no themes or no eligible nominations, or a criterion weight is invalid."""

    code = "data_integrity_error"


class PersistenceError(RecognitionEngineError):
    """A write for one theme failed. Cycle status is left unchanged."""

    code = "persistence_error"

    def __init__(self, message: str, theme_id: str | None = None) -> None:
        super().__init__(message)
        self.theme_id = theme_id


class CycleLockedError(RecognitionEngineError):
    """Another calculation holds the cycle lock."""

    code = "cycle_locked"
