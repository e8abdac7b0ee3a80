"""
Plugin initialization for Herald.

This module imports all built-in actions to register them with the registry.
Import this module to ensure all action types are available.
"""

# Import the actions package to trigger registration decorators
# pylint: disable=unused-import
# ruff: noqa: F401
from herald import actions

# Re-export registry functions for convenience
from herald.registry import ActionRegistry, get_factory_class, list_action_types
from herald.store import ConfigurationStore


def create_action_registry(configuration_store: ConfigurationStore) -> ActionRegistry:
    """Create a registry holding a factory for every built-in action type."""
    return ActionRegistry(configuration_store)


__all__ = [
    "ActionRegistry",
    "create_action_registry",
    "get_factory_class",
    "list_action_types",
]
