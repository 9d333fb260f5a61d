"""
Error kinds raised by the tracker.
Handlers at the action boundary (API routes, CLI commands) turn these into
user-visible messages.
"""


class TrackerError(Exception):
    """Base class for tracker failures."""


class ValidationError(TrackerError):
    """Malformed input: bad import payload, missing creation fields, illegal status change."""


class PersistenceError(TrackerError):
    """Underlying storage read or write failed."""


class GenerationError(TrackerError):
    """The drafting service failed to produce an email."""


class PolicyNotFoundError(TrackerError):
    """A policy, requirement or note id does not exist."""
