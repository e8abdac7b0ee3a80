"""
Core interfaces and data structures for Herald.

An alert action is one variant of a closed family (currently only the
email action). Each variant has a factory that knows how to parse its
definition fragment and how to carry it out when an alert fires.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from herald.reader import DocumentReader
    from herald.store import ConfigurationStore


def to_text(value: Any) -> str:
    """Render a value from a response document as text."""
    if value is None:
        return "null"
    if isinstance(value, (bool, Mapping, list)):
        return json.dumps(value, default=str)
    return str(value)


class AlertAction(ABC):  # pylint: disable=too-few-public-methods
    """Base class for the parsed definition of an alert action."""

    action_type: ClassVar[str]


@dataclass(frozen=True)
class ActionRequest:
    """The search request an alert ran when it triggered."""
    indices: list[str] = field(default_factory=list)
    source: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return json.dumps({"indices": self.indices, "source": self.source}, default=str)


@dataclass(frozen=True)
class TriggerResult:
    """Outcome of evaluating an alert's trigger."""
    trigger: str  # Human readable reason the alert fired
    action_request: ActionRequest
    action_response: dict[str, Any]
    trigger_response: dict[str, Any]

    @classmethod
    def from_dict(cls, data: Any) -> "TriggerResult":
        """
        Build a trigger result from a plain mapping.

        Expected keys: ``trigger``, ``request`` (``indices``, ``source``),
        ``response`` and ``trigger_response``. The trigger response defaults
        to the action response when omitted.

        Raises:
            ValueError: If the data or one of its sections has the wrong shape
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Trigger result must be a mapping, got {type(data).__name__}")

        request = _section(data, "request")
        response = _section(data, "response")
        indices = request.get("indices") or []
        if not isinstance(indices, list):
            raise ValueError("Trigger result [request.indices] must be a list")

        return cls(
            trigger=str(data.get("trigger", "")),
            action_request=ActionRequest(
                indices=[str(index) for index in indices],
                source=_section(request, "source"),
            ),
            action_response=response,
            trigger_response=(
                _section(data, "trigger_response") if "trigger_response" in data else response
            ),
        )


def _section(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    """Return data[key] as a dict; a missing or null section is empty."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Trigger result [{key}] must be a mapping")
    return dict(value)


class AlertActionFactory(ABC):
    """
    Base class for all action factories.

    A factory parses its own definition fragment and performs the action
    when the alert that owns it fires.
    """

    def __init__(self, configuration_store: "ConfigurationStore"):
        """
        Initialize the factory.

        Args:
            configuration_store: Source of the global configuration
        """
        self.configuration_store = configuration_store

    @abstractmethod
    def create_action(self, reader: "DocumentReader") -> AlertAction:
        """
        Parse an action definition.

        Args:
            reader: Reader positioned on the START_OBJECT of the definition

        Returns:
            The parsed action
        """
        raise NotImplementedError

    @abstractmethod
    def dispatch(self, action: AlertAction, alert_name: str, result: TriggerResult) -> bool:
        """
        Perform the action for a fired alert.

        Args:
            action: Action previously returned by create_action
            alert_name: Name of the alert that fired
            result: The trigger result of that alert

        Returns:
            True once the action completed
        """
        raise NotImplementedError
