"""Errors raised while scoring a submission."""


class ScoringError(Exception):
    """Base class for scoring failures."""

    pass


class ValidationError(ScoringError):
    """Raised when a submission has the wrong shape.

    Reported to the caller as a client error; never retried.
    """

    pass


class ConfigurationError(ScoringError):
    """Raised when static data is missing an entry for a reachable result."""

    def __init__(self, factor_id: str, level: str) -> None:
        self.factor_id = factor_id
        self.level = level
        super().__init__(f"No knowledge entry for factor '{factor_id}' at level '{level}'")


class InternalError(ScoringError):
    """Raised for any unexpected failure during scoring."""

    pass
