"""
Error taxonomy for the engine.

All errors are local validation failures raised synchronously at the
boundary of a call. Nothing is retried internally.
"""


class SchedulingError(Exception):
    """Base class for every error the engine raises."""


class ParseError(SchedulingError, ValueError):
    """Malformed timestamp, clock string or date."""

    def __init__(self, value, expected: str = "timestamp"):
        self.value = value
        self.expected = expected
        super().__init__(f"Cannot parse {value!r} as {expected}")


class InvalidDurationError(SchedulingError, ValueError):
    """Requested duration is non-positive or would run past midnight."""

    def __init__(self, duration_minutes, reason: str = "must be positive"):
        self.duration_minutes = duration_minutes
        super().__init__(f"Invalid duration {duration_minutes!r}: {reason}")


class MissingSubjectError(SchedulingError):
    """Conflict check without a team member or a client."""

    def __init__(self):
        super().__init__("At least one of team_id or client_id is required")


class UnknownSubjectError(SchedulingError, KeyError):
    """The engine snapshot holds no subject with this kind and id."""

    def __init__(self, kind, subject_id):
        self.kind = kind
        self.subject_id = subject_id
        super().__init__(f"No {kind} subject with id {subject_id}")
