"""Error kinds raised while turning a document into a quiz.

Every error carries a message meant to be shown to the user as-is.
"""
from typing import Optional


class QuizGenError(RuntimeError):
    """Base class for extraction and quiz generation failures."""

    status_code = 500


class UnsupportedType(QuizGenError):
    status_code = 415


class ExtractionFailure(QuizGenError):
    status_code = 422


class EmptyInput(QuizGenError):
    status_code = 400


class NetworkFailure(QuizGenError):
    """The generation endpoint could not be reached or answered non-2xx."""

    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class MalformedResponse(QuizGenError):
    status_code = 502


class ValidationFailure(QuizGenError):
    status_code = 502
