"""
Action factory registry for Herald.

This module provides a central registry of action factory classes keyed by
action type name, and an ActionRegistry that parses and performs the
actions of an alert definition.
"""

from collections.abc import Callable

from herald.core import AlertAction, AlertActionFactory, TriggerResult
from herald.errors import MalformedActionDefinition
from herald.reader import DocumentReader, Token
from herald.store import ConfigurationStore

_factory_classes: dict[str, type[AlertActionFactory]] = {}


def register_action_factory(
    type_name: str
) -> Callable[[type[AlertActionFactory]], type[AlertActionFactory]]:
    """Decorator to register an action factory class."""
    def decorator(cls: type[AlertActionFactory]) -> type[AlertActionFactory]:
        _factory_classes[type_name] = cls
        return cls
    return decorator


def get_factory_class(type_name: str) -> type[AlertActionFactory]:
    """Get an action factory class by type name."""
    if type_name not in _factory_classes:
        raise ValueError(f"Unknown action type: {type_name}")
    return _factory_classes[type_name]


def list_action_types() -> list[str]:
    """List all registered action type names."""
    return list(_factory_classes.keys())


class ActionRegistry:
    """
    Factory instances for every registered action type.

    Factories share one configuration store. Each factory keeps its own
    cached configuration, so one registry should live for the lifetime of
    the process.
    """

    def __init__(self, configuration_store: ConfigurationStore) -> None:
        self.configuration_store = configuration_store
        self._factories: dict[str, AlertActionFactory] = {
            type_name: cls(configuration_store)
            for type_name, cls in _factory_classes.items()
        }

    def get_factory(self, type_name: str) -> AlertActionFactory:
        """Get the factory instance for an action type."""
        if type_name not in self._factories:
            raise ValueError(f"Unknown action type: {type_name}")
        return self._factories[type_name]

    def parse_actions(self, reader: DocumentReader) -> list[AlertAction]:
        """
        Parse an ``actions`` object such as ``{"email": {...}}``.

        Args:
            reader: Reader positioned on the START_OBJECT of the actions object

        Returns:
            Actions in document order; the reader is left on its END_OBJECT

        Raises:
            MalformedActionDefinition: On an unknown action type or bad token
        """
        if reader.current_token is not Token.START_OBJECT:
            raise MalformedActionDefinition(
                f"Expected START_OBJECT but found [{reader.current_token}]"
            )

        actions: list[AlertAction] = []
        while (token := reader.next_token()) is not Token.END_OBJECT:
            if token is not Token.FIELD_NAME:
                raise MalformedActionDefinition(f"Unexpected token [{token}]")

            type_name = reader.current_name() or ""
            if type_name not in self._factories:
                raise MalformedActionDefinition(f"Unknown action type [{type_name}]", type_name)

            reader.next_token()
            actions.append(self._factories[type_name].create_action(reader))

        return actions

    def do_action(self, action: AlertAction, alert_name: str, result: TriggerResult) -> bool:
        """Perform an action with the factory registered for its type."""
        return self.get_factory(action.action_type).dispatch(action, alert_name, result)
