"""Exception hierarchy for the screening service."""

from dataclasses import dataclass


class ScreeningError(Exception):
    """Base exception for all screening errors."""


class UnrecoverableInputError(ScreeningError):
    """Input is neither narrative text nor a valid structured profile."""


class ExternalServiceFailure(ScreeningError):
    """The external extraction layer failed, timed out, or returned a non-conforming response."""


class GuidelineEvaluationError(ScreeningError):
    """A guideline rule could not read the field it needs (wrong type or invalid value)."""

    def __init__(self, field_name: str, message: str):
        super().__init__(message)
        self.field_name = field_name


@dataclass(frozen=True)
class ExtractionGap:
    """A required fact that no extraction layer could determine.

    Recorded on the profile as a documentation gap; never raised.
    """
    field_name: str
    notice: str

    def __str__(self) -> str:
        return self.notice
