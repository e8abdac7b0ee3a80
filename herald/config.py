"""
Mail configuration loading and validation for Herald.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

# Section of the configuration document holding the global mail settings
GLOBAL_EMAIL_CONFIG = "email"

DEFAULT_SERVER_HOST = "smtp.gmail.com"
DEFAULT_SERVER_PORT = 587


class MailConfig(BaseModel):
    """Global SMTP settings shared by every email action."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    server_host: str = Field(
        default=DEFAULT_SERVER_HOST,
        min_length=1,
        validation_alias=AliasChoices("alerts.action.email.server.name", "server_host"),
    )
    # "snpt" is the historical key spelling, still accepted
    server_port: int = Field(
        default=DEFAULT_SERVER_PORT,
        gt=0,
        lt=65536,
        validation_alias=AliasChoices(
            "alerts.action.snpt.server.port",
            "alerts.action.email.server.port",
            "server_port",
        ),
    )
    from_address: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("alerts.action.email.from.address", "from_address"),
    )
    from_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("alerts.action.email.from.passwd", "from_password"),
    )


def flatten_settings(settings: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested mappings into dotted keys.

    ``{"alerts": {"action": {"email": {"server": {"name": "x"}}}}}`` becomes
    ``{"alerts.action.email.server.name": "x"}``.
    """
    flat: dict[str, Any] = {}
    for key, value in settings.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten_settings(value, f"{full_key}."))
        else:
            flat[full_key] = value
    return flat


def parse_mail_config(raw_config: Mapping[str, Any] | None) -> MailConfig:
    """
    Validate the mail section of a configuration document.

    Args:
        raw_config: Parsed configuration document

    Returns:
        Validated MailConfig

    Raises:
        ValueError: If the section is missing or invalid
    """
    if not isinstance(raw_config, Mapping):
        raise ValueError("Configuration document must be a mapping")

    section = raw_config.get(GLOBAL_EMAIL_CONFIG)
    if not isinstance(section, Mapping):
        raise ValueError(f"Configuration has no [{GLOBAL_EMAIL_CONFIG}] section")

    try:
        return MailConfig.model_validate(flatten_settings(section))
    except ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}") from e


def load_mail_config(config_path: str | Path) -> MailConfig:
    """
    Load and validate the mail configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Validated MailConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with path.open('r', encoding='utf-8') as f:
        raw_config: dict[str, Any] = yaml.safe_load(f)

    return parse_mail_config(raw_config)
