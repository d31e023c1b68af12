"""
Error taxonomy for the session engine.

None of these is fatal: each is local to one card and recoverable by
resetting or redrawing that card.

- InvalidExerciseDefinition is raised (a ValueError, like every other
  validation failure in the models).
- IllegalTransition is a warning category. Phase operations that would
  desync the engine emit it through ``warnings.warn`` and return False
  instead of changing state.
- UnauthorizedSkip is raised so the caller can show an explicit denial.
"""


class SessionEngineError(Exception):
    """Base class for session engine errors."""


class InvalidExerciseDefinition(SessionEngineError, ValueError):
    """Exercise definition has unusable base values."""


class IllegalTransition(SessionEngineError, RuntimeWarning):
    """A phase operation was requested in a state that does not accept it."""


class UnauthorizedSkip(SessionEngineError, PermissionError):
    """Skip requested without privilege."""
