"""FitCoach error types.

Non-plan replies and malformed plans are not errors: they simply leave the
conversation in generating_plan. Everything below is raised to the caller.
"""


class FitCoachError(Exception):
    """Base class for errors surfaced to the caller."""


class InvalidTurnError(FitCoachError):
    """The turn was rejected before any state was touched (missing fields)."""


class ApprovalError(FitCoachError):
    """Approval preconditions do not hold; conversation state is unchanged."""


class LLMServiceError(FitCoachError):
    """The completion provider is unavailable or failed. Not retried here."""


class PersistenceError(FitCoachError):
    """A database write failed and was fully rolled back."""
