"""Domain semantic exceptions."""


class DomainError(Exception):
    """Base domain exception."""

    code = "DOMAIN_ERROR"


class ModeChangeRejected(DomainError):
    """A travel-mode change failed its preconditions; nothing was changed."""

    code = "MODE_CHANGE_REJECTED"

    def __init__(self, segment_key: str, reason: str):
        self.segment_key = segment_key
        self.reason = reason
        super().__init__(f"mode change rejected for {segment_key}: {reason}")


class InvalidSequence(DomainError):
    """Raised when a new ordering references unknown or duplicate activity ids."""

    code = "INVALID_SEQUENCE"


class UnknownActivity(DomainError):
    """Raised when an edit targets an activity id that is not in the day."""

    code = "UNKNOWN_ACTIVITY"

    def __init__(self, activity_id: str):
        self.activity_id = activity_id
        super().__init__(f"Unknown activity: {activity_id}")
