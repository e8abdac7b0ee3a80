"""Herald exception hierarchy.

All runtime failures inherit from HeraldError. ActionMismatchError is
deliberately outside it: it signals a wiring bug, not a runtime condition.
"""


class HeraldError(Exception):
    """Base exception for all Herald errors."""


class DocumentSyntaxError(HeraldError):
    """Raised when a structured document cannot be tokenized."""


class MalformedActionDefinition(HeraldError):
    """Raised when an action definition contains an unexpected field or token."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ConfigurationUnavailable(HeraldError):
    """Raised when no mail configuration could be obtained."""


class DeliveryFailed(HeraldError):
    """Raised when the message could not be handed to the SMTP server."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class ActionMismatchError(RuntimeError):
    """Raised when an action is routed to a factory that cannot handle it."""
