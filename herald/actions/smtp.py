"""
Email (SMTP) alert action for Herald.
"""

import smtplib
import threading
from dataclasses import dataclass
from typing import ClassVar

from herald.config import MailConfig
from herald.core import AlertAction, AlertActionFactory, TriggerResult
from herald.errors import (
    ActionMismatchError,
    ConfigurationUnavailable,
    DeliveryFailed,
    MalformedActionDefinition,
)
from herald.logging_config import get_logger
from herald.reader import DocumentReader, Token
from herald.registry import register_action_factory
from herald.rendering import render_report
from herald.store import ConfigurationStore
from herald.transport import (
    SmtpTransport,
    build_session,
    resolve_address,
    resolve_recipients,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class SmtpAction(AlertAction):
    """Who to email when an alert fires, and which hit field to show."""
    action_type: ClassVar[str] = "email"

    display_field: str | None = None
    email_addresses: tuple[str, ...] = ()


@register_action_factory("email")
class SmtpActionFactory(AlertActionFactory):
    """
    Parses and performs email actions.

    Definition:
        display: Optional field of each hit's _source to show in the body
        addresses: List of recipient email addresses

    The global mail configuration is fetched from the store on first use
    and kept up to date by the store's pushes.
    """

    def __init__(
        self,
        configuration_store: ConfigurationStore,
        transport: SmtpTransport | None = None
    ) -> None:
        super().__init__(configuration_store)
        self.transport = transport or SmtpTransport()
        self._config: MailConfig | None = None
        self._subscribed = False
        self._lock = threading.RLock()

    def create_action(self, reader: DocumentReader) -> SmtpAction:
        """
        Parse an email action definition.

        Args:
            reader: Reader positioned on the START_OBJECT of the definition

        Returns:
            The parsed SmtpAction; the reader is left on its END_OBJECT

        Raises:
            MalformedActionDefinition: On any unexpected field or token
        """
        if reader.current_token is not Token.START_OBJECT:
            raise MalformedActionDefinition(
                f"Expected START_OBJECT but found [{reader.current_token}]"
            )

        display: str | None = None
        addresses: list[str] = []
        field_name: str | None = None

        while (token := reader.next_token()) is not Token.END_OBJECT:
            if token is Token.FIELD_NAME:
                field_name = reader.current_name()
            elif token is not None and token.is_value:
                if field_name != "display":
                    raise MalformedActionDefinition(f"Unexpected field [{field_name}]", field_name)
                display = None if token is Token.VALUE_NULL else reader.text()
            elif token is Token.START_ARRAY:
                if field_name != "addresses":
                    raise MalformedActionDefinition(f"Unexpected field [{field_name}]", field_name)
                addresses.extend(self._read_addresses(reader))
            else:
                raise MalformedActionDefinition(f"Unexpected token [{token}]", field_name)

        return SmtpAction(display_field=display, email_addresses=tuple(addresses))

    @staticmethod
    def _read_addresses(reader: DocumentReader) -> list[str]:
        addresses = []
        while (token := reader.next_token()) is not Token.END_ARRAY:
            if token is None or not token.is_value:
                raise MalformedActionDefinition(
                    f"Unexpected token [{token}] in [addresses]", "addresses"
                )
            addresses.append(reader.text())
        return addresses

    def dispatch(self, action: AlertAction, alert_name: str, result: TriggerResult) -> bool:
        """
        Email the report for a fired alert.

        Args:
            action: An SmtpAction
            alert_name: Name of the alert that fired
            result: The alert's trigger result

        Returns:
            True once the SMTP server accepted the message

        Raises:
            ActionMismatchError: If action is not an SmtpAction
            ConfigurationUnavailable: If no mail configuration can be fetched
            DeliveryFailed: If the message could not be delivered
        """
        match action:
            case SmtpAction():
                smtp_action = action
            case _:
                raise ActionMismatchError(
                    f"Bad action [{type(action).__name__}] passed to "
                    f"{type(self).__name__}, expected [{SmtpAction.__name__}]"
                )

        # One snapshot for the whole call
        config = self._resolve_config()
        session = build_session(config)
        report = render_report(smtp_action, alert_name, result)

        sender = resolve_address(config.from_address)
        recipients = resolve_recipients(smtp_action.email_addresses)

        try:
            self.transport.send(session, report, sender, recipients)
        except (smtplib.SMTPException, OSError, UnicodeError) as e:
            logger.warning(
                "Failed to send email for alert '%s' via %s:%s",
                alert_name,
                session.host,
                session.port,
                exc_info=True
            )
            raise DeliveryFailed("Failed to send mail", cause=e) from e

        logger.info(
            "Email for alert '%s' sent to %s recipient(s)",
            alert_name,
            len(recipients)
        )
        return True

    def _resolve_config(self) -> MailConfig:
        """Return the cached snapshot, fetching and subscribing on first use."""
        config = self._config
        if config is None:
            with self._lock:
                if self._config is None:
                    # Subscribe before fetching so no update can slip between the two
                    if not self._subscribed:
                        self.configuration_store.register_listener(self)
                        self._subscribed = True
                    self._config = self.configuration_store.get_global_config()
                config = self._config

        if config is None:
            raise ConfigurationUnavailable(
                "Unable to retrieve [email] configuration from the configuration store"
            )
        return config

    def receive_configuration_update(self, config: MailConfig) -> None:
        """Replace the cached configuration snapshot."""
        with self._lock:
            self._config = config
        logger.debug(
            "Mail configuration updated (server %s:%s)",
            config.server_host,
            config.server_port
        )


# Export for dynamic importing
__all__ = ["SmtpAction", "SmtpActionFactory"]
