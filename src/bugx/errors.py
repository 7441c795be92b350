"""
Exception hierarchy for the BugX debugging toolkit.

Every failure the toolkit knows about is one of four kinds: a missing
template, invalid caller input, an unavailable external dependency, or an
exception raised inside a workflow phase. None of them is fatal to the
process; callers convert them into structured results.
"""

from typing import List, Optional


class BugXError(Exception):
    """Base exception for BugX errors."""
    pass


class TemplateNotFoundError(BugXError, KeyError):
    """Raised when no fix template is registered for an error type."""

    def __init__(self, error_type: str, available: Optional[List[str]] = None):
        self.error_type = error_type
        self.available = list(available or [])
        super().__init__(f"No template registered for error type '{error_type}'")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class ValidationFailure(BugXError, ValueError):
    """Raised when caller input fails validation.

    The message is meant to be shown to the user as-is.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = list(errors or [])
        super().__init__(message)

    @classmethod
    def from_validation_error(cls, error) -> 'ValidationFailure':
        """Build from a pydantic ``ValidationError``, one detail per field."""
        details = [
            f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}"
            for e in error.errors()
        ]
        return cls("Invalid input: " + "; ".join(details), details)


class DependencyFailure(BugXError):
    """Raised when an external dependency (e.g. the datastore) is unavailable."""

    def __init__(self, message: str, dependency: str = "database"):
        self.dependency = dependency
        super().__init__(message)


class WorkflowFailure(BugXError):
    """Raised when a workflow phase fails."""

    def __init__(self, phase: str, cause: BaseException):
        self.phase = phase
        self.cause = cause
        super().__init__(f"Workflow phase '{phase}' failed: {cause}")
