"""
Configuration stores that serve and push the global mail configuration.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import yaml
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer as WatchdogObserver

from herald.config import MailConfig, load_mail_config
from herald.logging_config import get_logger

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = get_logger(__name__)


class ConfigurationListener(Protocol):  # pylint: disable=too-few-public-methods
    """Receives pushed configuration snapshots."""

    def receive_configuration_update(self, config: MailConfig) -> None:
        """Replace the listener's cached configuration."""


class ConfigurationStore(ABC):
    """
    Base class for configuration stores.

    A store serves the current configuration on demand and pushes every
    later replacement to its registered listeners.
    """

    def __init__(self) -> None:
        self._listeners: list[ConfigurationListener] = []
        self._listeners_lock = threading.Lock()

    @abstractmethod
    def get_global_config(self) -> MailConfig | None:
        """
        Fetch the current configuration.

        Returns:
            The configuration, or None if none is available
        """
        raise NotImplementedError

    def register_listener(self, listener: ConfigurationListener) -> None:
        """Subscribe a listener to future configuration updates."""
        with self._listeners_lock:
            self._listeners.append(listener)

    def _notify_listeners(self, config: MailConfig) -> None:
        """Push a new configuration to every registered listener."""
        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            listener.receive_configuration_update(config)


class InMemoryConfigurationStore(ConfigurationStore):
    """
    Store holding the configuration in memory.

    Useful for embedding Herald in another process and for testing.
    """

    def __init__(self, config: MailConfig | None = None) -> None:
        super().__init__()
        self._config = config

    def get_global_config(self) -> MailConfig | None:
        return self._config

    def update(self, config: MailConfig) -> None:
        """Replace the configuration and push it to listeners."""
        self._config = config
        self._notify_listeners(config)


class FileConfigurationStore(ConfigurationStore):
    """
    Store backed by a YAML file, reloaded when the file changes.

    The file's ``email`` section holds the settings, either as dotted keys
    or as nested mappings. A missing or invalid file yields no
    configuration; the reason is logged.
    """

    def __init__(self, config_path: str | Path) -> None:
        super().__init__()
        self.config_path = Path(config_path)
        self.observer: BaseObserver | None = None

    def get_global_config(self) -> MailConfig | None:
        try:
            return load_mail_config(self.config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Mail configuration unavailable from %s: %s", self.config_path, e)
            return None

    def reload(self) -> None:
        """Re-read the file and push the result if it is valid."""
        config = self.get_global_config()
        if config is None:
            logger.warning("Ignoring invalid update of %s", self.config_path)
            return

        logger.info("Mail configuration reloaded from %s", self.config_path)
        self._notify_listeners(config)

    def start(self) -> None:
        """Start watching the configuration file for changes."""
        self.observer = WatchdogObserver()
        self.observer.schedule(
            self._create_event_handler(),
            str(self.config_path.parent),
            recursive=False
        )
        self.observer.start()
        logger.debug("Watching %s for configuration changes", self.config_path)

    def stop(self) -> None:
        """Stop watching the configuration file."""
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None

    def _create_event_handler(self) -> FileSystemEventHandler:
        """Create a watchdog event handler that reloads on changes to our file."""
        store = self
        watch_path = self.config_path.resolve()

        class Handler(FileSystemEventHandler):
            """Reloads the store when the watched file is written or replaced."""

            def _is_watched(self, path: str | bytes) -> bool:
                if isinstance(path, bytes):
                    path = path.decode()
                return Path(path).resolve() == watch_path

            def on_modified(self, event: FileSystemEvent) -> None:
                if self._is_watched(event.src_path):
                    store.reload()

            def on_created(self, event: FileSystemEvent) -> None:
                if self._is_watched(event.src_path):
                    store.reload()

            def on_moved(self, event: FileSystemEvent) -> None:
                # Editors often save by renaming a temp file over the original
                if self._is_watched(getattr(event, "dest_path", "")):
                    store.reload()

        return Handler()
