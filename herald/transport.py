"""
SMTP transport for Herald.
"""

import smtplib
from collections.abc import Iterable
from dataclasses import dataclass
from email.mime.text import MIMEText

from pydantic import EmailStr, TypeAdapter, ValidationError

from herald.config import MailConfig
from herald.errors import DeliveryFailed
from herald.logging_config import get_logger
from herald.rendering import RenderedReport

logger = get_logger(__name__)

_address_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class SmtpSession:
    """Connection parameters for one delivery, built from a single config snapshot."""
    host: str
    port: int
    starttls: bool = True
    credentials: tuple[str, str] | None = None  # (username, password)

    @property
    def authenticated(self) -> bool:
        """True when the session logs in before sending."""
        return self.credentials is not None


def build_session(config: MailConfig) -> SmtpSession:
    """
    Build the SMTP session parameters for a configuration snapshot.

    The session authenticates with the from-address only when a password
    is configured.
    """
    credentials = None
    if config.from_password is not None:
        credentials = (config.from_address, config.from_password)

    return SmtpSession(
        host=config.server_host,
        port=config.server_port,
        starttls=True,
        credentials=credentials,
    )


def resolve_address(address: str) -> str:
    """
    Validate a single email address.

    Raises:
        DeliveryFailed: If the address is malformed
    """
    try:
        resolved = _address_adapter.validate_python(address)
    except ValidationError as e:
        raise DeliveryFailed(f"Invalid email address [{address}]", cause=e) from e

    # The session never negotiates SMTPUTF8, so envelope addresses must be ASCII
    if not resolved.isascii():
        raise DeliveryFailed(f"Email address [{address}] is not ASCII")
    return resolved


def resolve_recipients(addresses: Iterable[str]) -> list[str]:
    """
    Validate every recipient address, in order.

    Raises:
        DeliveryFailed: If any address is malformed or there are none
    """
    recipients = [resolve_address(address) for address in addresses]
    if not recipients:
        raise DeliveryFailed("No recipients configured for email action")
    return recipients


class SmtpTransport:  # pylint: disable=too-few-public-methods
    """Delivers rendered reports over a STARTTLS-upgraded SMTP connection."""

    def send(
        self,
        session: SmtpSession,
        report: RenderedReport,
        sender: str,
        recipients: list[str]
    ) -> None:
        """
        Send one message to all recipients.

        Args:
            session: Connection parameters
            report: Subject and body to send
            sender: From address
            recipients: Validated recipient addresses

        Raises:
            smtplib.SMTPException: If the server rejects the session, the message
                or any single recipient
            OSError: If the connection fails
        """
        msg = MIMEText(report.body, "plain", "utf-8")
        msg["Subject"] = report.subject
        msg["From"] = sender
        msg["To"] = ", ".join(recipients)

        with smtplib.SMTP(session.host, session.port) as server:
            if session.starttls:
                server.starttls()
            if session.credentials is not None:
                server.login(*session.credentials)
            refused = server.sendmail(sender, recipients, msg.as_string())
            if refused:
                raise smtplib.SMTPRecipientsRefused(refused)
