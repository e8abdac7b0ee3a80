"""
Tests for mail configuration loading and configuration stores.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from herald.config import MailConfig, flatten_settings, load_mail_config, parse_mail_config
from herald.store import FileConfigurationStore, InMemoryConfigurationStore


class TestMailConfig:
    """Tests for the MailConfig model."""

    def test_defaults(self) -> None:
        """Test default server host and port."""
        config = MailConfig(from_address="alerts@example.com")

        assert config.server_host == "smtp.gmail.com"
        assert config.server_port == 587
        assert config.from_password is None

    def test_setting_keys(self) -> None:
        """Test validation from dotted setting keys."""
        config = MailConfig.model_validate({
            "alerts.action.email.server.name": "smtp.example.com",
            "alerts.action.snpt.server.port": "2525",
            "alerts.action.email.from.address": "alerts@example.com",
            "alerts.action.email.from.passwd": "secret",
        })

        assert config.server_host == "smtp.example.com"
        assert config.server_port == 2525
        assert config.from_address == "alerts@example.com"
        assert config.from_password == "secret"

    def test_email_port_key(self) -> None:
        """Test the alternative port key spelling."""
        config = MailConfig.model_validate({
            "alerts.action.email.server.port": 465,
            "alerts.action.email.from.address": "alerts@example.com",
        })

        assert config.server_port == 465

    def test_from_address_required(self) -> None:
        """Test that the from-address is required."""
        with pytest.raises(ValidationError):
            MailConfig.model_validate({"alerts.action.email.server.name": "smtp.example.com"})

    def test_invalid_port(self) -> None:
        """Test that an out-of-range port is rejected."""
        with pytest.raises(ValidationError):
            MailConfig(from_address="alerts@example.com", server_port=70000)

    def test_frozen(self) -> None:
        """Test that a snapshot cannot be mutated."""
        config = MailConfig(from_address="alerts@example.com")

        with pytest.raises(ValidationError):
            config.server_host = "other"  # type: ignore[misc]


class TestLoadMailConfig:
    """Tests for loading configuration files."""

    def test_flatten_settings(self) -> None:
        """Test flattening nested mappings into dotted keys."""
        flat = flatten_settings({"alerts": {"action": {"email": {"server": {"name": "x"}}}}, "y": 1})

        assert flat == {"alerts.action.email.server.name": "x", "y": 1}

    def test_load_dotted_keys(self, tmp_path: Path) -> None:
        """Test loading a file with dotted keys."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("""
email:
  alerts.action.email.server.name: smtp.example.com
  alerts.action.snpt.server.port: 2525
  alerts.action.email.from.address: alerts@example.com
  alerts.action.email.from.passwd: secret
""")

        config = load_mail_config(config_file)

        assert config == MailConfig(
            server_host="smtp.example.com",
            server_port=2525,
            from_address="alerts@example.com",
            from_password="secret",
        )

    def test_load_nested_keys(self, tmp_path: Path) -> None:
        """Test loading a file with nested mappings."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("""
email:
  alerts:
    action:
      email:
        from:
          address: alerts@example.com
""")

        config = load_mail_config(config_file)

        assert config.from_address == "alerts@example.com"
        assert config.server_host == "smtp.gmail.com"

    def test_load_missing_file(self) -> None:
        """Test that loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_mail_config("/nonexistent/herald.yaml")

    def test_missing_section(self) -> None:
        """Test that a document without an email section is invalid."""
        with pytest.raises(ValueError, match="no \\[email\\] section"):
            parse_mail_config({"other": {}})

    def test_invalid_values(self) -> None:
        """Test that invalid values raise ValueError."""
        with pytest.raises(ValueError, match="validation error"):
            parse_mail_config({"email": {"alerts.action.snpt.server.port": "x"}})

    def test_empty_document(self) -> None:
        """Test that an empty document is invalid."""
        with pytest.raises(ValueError):
            parse_mail_config(None)


class TestInMemoryConfigurationStore:
    """Tests for InMemoryConfigurationStore."""

    def test_update_notifies_listeners(self) -> None:
        """Test that updates are pushed to every listener."""
        store = InMemoryConfigurationStore()
        listeners = [MagicMock(), MagicMock()]
        for listener in listeners:
            store.register_listener(listener)
        config = MailConfig(from_address="alerts@example.com")

        store.update(config)

        assert store.get_global_config() is config
        for listener in listeners:
            listener.receive_configuration_update.assert_called_once_with(config)


class TestFileConfigurationStore:
    """Tests for FileConfigurationStore."""

    def test_get_global_config(self, tmp_path: Path) -> None:
        """Test reading the configuration from the file."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("email:\n  from_address: alerts@example.com\n")

        config = FileConfigurationStore(config_file).get_global_config()

        assert config is not None
        assert config.from_address == "alerts@example.com"

    def test_missing_file_is_unavailable(self, tmp_path: Path) -> None:
        """Test that a missing file yields no configuration."""
        assert FileConfigurationStore(tmp_path / "missing.yaml").get_global_config() is None

    def test_invalid_file_is_unavailable(self, tmp_path: Path) -> None:
        """Test that a malformed file yields no configuration."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("email: [unclosed")

        assert FileConfigurationStore(config_file).get_global_config() is None

    def test_reload_pushes_valid_config(self, tmp_path: Path) -> None:
        """Test that reload pushes the new configuration."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("email:\n  from_address: old@example.com\n")
        store = FileConfigurationStore(config_file)
        listener = MagicMock()
        store.register_listener(listener)

        config_file.write_text("email:\n  from_address: new@example.com\n")
        store.reload()

        pushed = listener.receive_configuration_update.call_args[0][0]
        assert pushed.from_address == "new@example.com"

    def test_reload_ignores_invalid_config(self, tmp_path: Path) -> None:
        """Test that an invalid file is not pushed."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("email: {}\n")
        store = FileConfigurationStore(config_file)
        listener = MagicMock()
        store.register_listener(listener)

        store.reload()

        listener.receive_configuration_update.assert_not_called()

    def test_event_handler_reloads_only_watched_file(self, tmp_path: Path) -> None:
        """Test that only events for the configuration file trigger a reload."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("email:\n  from_address: alerts@example.com\n")
        store = FileConfigurationStore(config_file)
        store.reload = MagicMock()  # type: ignore[method-assign]
        handler = store._create_event_handler()  # pylint: disable=protected-access

        other = MagicMock(src_path=str(tmp_path / "other.yaml"))
        handler.on_modified(other)
        store.reload.assert_not_called()

        watched = MagicMock(src_path=str(config_file))
        handler.on_modified(watched)
        store.reload.assert_called_once()

    def test_start_and_stop(self, tmp_path: Path) -> None:
        """Test starting and stopping the file watcher."""
        config_file = tmp_path / "herald.yaml"
        config_file.write_text("email:\n  from_address: alerts@example.com\n")
        store = FileConfigurationStore(config_file)

        store.start()
        assert store.observer is not None
        store.stop()

        assert store.observer is None
