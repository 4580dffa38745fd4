"""Exception types raised by the relay."""


class RelayError(Exception):
    """Base class for relay errors."""


class ConfigurationError(RelayError):
    """Destination coordinates are missing or empty."""


class MalformedPayload(RelayError):
    """Notification body is not valid JSON or lacks the top-level 'value' collection."""

    INVALID_JSON = "invalid_json"
    EMPTY_OR_MALFORMED = "empty_or_malformed"

    def __init__(self, message: str, cause: str = EMPTY_OR_MALFORMED):
        super().__init__(message)
        self.cause = cause

    @property
    def is_invalid_json(self) -> bool:
        return self.cause == self.INVALID_JSON


class PublishFailure(RelayError):
    """Sending a batch to the queue failed."""

    def __init__(self, message: str, queue_name: str = "", message_count: int = 0):
        super().__init__(message)
        self.queue_name = queue_name
        self.message_count = message_count
