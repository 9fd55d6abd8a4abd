"""Exception types raised by DevTracker services."""


class DevTrackerError(Exception):
    """Base class for all DevTracker errors."""


class ValidationError(DevTrackerError):
    """Input rejected before anything was written."""


class VerificationRequiredError(ValidationError):
    """Goal category needs a verified count before it can be completed."""


class GoalLockedError(DevTrackerError):
    """Goal is still inside its lock timer."""


class NotFoundError(DevTrackerError):
    """Requested record does not exist."""


class StoreError(DevTrackerError):
    """Backend read or write failed."""


class ProviderError(DevTrackerError):
    """An external statistics provider failed (timeout, HTTP error, bad body)."""


class StatsUnavailableError(DevTrackerError):
    """Every statistics provider failed for a username."""
