"""Translate exceptions into user-facing diagnostics."""

from __future__ import annotations

from typing import Optional

from keyward.exceptions import KeywardError, WaitTimeoutError
from keyward.models import Diagnostic


def _summary(error: BaseException) -> str:
    if isinstance(error, WaitTimeoutError):
        return "Timed out"
    if isinstance(error, KeywardError):
        return error.code.replace("_", " ").capitalize()
    return "Error"


def diagnostics_from_error(error: Optional[BaseException]) -> list[Diagnostic]:
    """Convert an error into a list of error diagnostics.

    None gives an empty list. Each member of an ExceptionGroup becomes its
    own diagnostic, nested groups included.
    """
    if error is None:
        return []
    if isinstance(error, BaseExceptionGroup):
        result: list[Diagnostic] = []
        for inner in error.exceptions:
            result.extend(diagnostics_from_error(inner))
        return result
    return [Diagnostic(summary=_summary(error), detail=str(error))]
