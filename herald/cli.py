"""
Herald CLI - Command line interface for email alert actions.

Provides commands for:
- Mail configuration validation
- Parsing action definitions
- Sending a notification for a trigger result
"""

import argparse
import sys
from pathlib import Path

import yaml

from herald.config import load_mail_config
from herald.core import AlertAction, TriggerResult
from herald.errors import HeraldError
from herald.logging_config import get_logger, setup_logging
from herald.plugins import ActionRegistry, create_action_registry, list_action_types
from herald.reader import DocumentReader
from herald.store import FileConfigurationStore

logger = get_logger(__name__)


def _read_action(path: Path, type_name: str, registry: ActionRegistry) -> AlertAction:
    """Parse a single action definition file with the factory for type_name."""
    factory = registry.get_factory(type_name)

    with path.open('r', encoding='utf-8') as f:
        reader = DocumentReader(f)
        reader.next_token()
        return factory.create_action(reader)


def cmd_config_validate(args: argparse.Namespace) -> int:
    """Validate the mail configuration file."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        config = load_mail_config(config_path)
        print(f"✓ Configuration valid: {config_path}")
        print(f"  - Server: {config.server_host}:{config.server_port}")
        print(f"  - From: {config.from_address}")
        print(f"  - Authentication: {'yes' if config.from_password is not None else 'no'}")
        return 0
    except Exception as e:  # pylint: disable=broad-exception-caught
        print(f"✗ Configuration invalid: {e}", file=sys.stderr)
        return 1


def cmd_action_parse(args: argparse.Namespace) -> int:
    """Parse an action definition and print it."""
    action_path = Path(args.file)

    if not action_path.exists():
        print(f"Error: Action file not found: {action_path}", file=sys.stderr)
        return 1

    try:
        action = _read_action(
            action_path, args.type, create_action_registry(FileConfigurationStore(args.config))
        )
    except (HeraldError, ValueError) as e:
        print(f"✗ Action invalid: {e}", file=sys.stderr)
        return 1

    print(f"✓ Action valid: {action_path}")
    print(f"  - Type: {action.action_type}")
    for key, value in vars(action).items():
        print(f"  - {key}: {value}")
    return 0


def cmd_notify(args: argparse.Namespace) -> int:
    """Send the notification for a trigger result."""
    action_path = Path(args.action_file)
    result_path = Path(args.result_file)

    for path in (action_path, result_path):
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1

    store = FileConfigurationStore(args.config)
    registry = create_action_registry(store)

    try:
        action = _read_action(action_path, args.type, registry)
        with result_path.open('r', encoding='utf-8') as f:
            result = TriggerResult.from_dict(yaml.safe_load(f) or {})

        print(f"Sending notification for alert: {args.alert}")
        registry.do_action(action, args.alert, result)
        print(f"  ✓ {action.action_type}")
        return 0
    except (HeraldError, ValueError, yaml.YAMLError) as e:
        print(f"  ✗ {args.type}: {e}", file=sys.stderr)
        logger.debug("Notification failed", exc_info=True)
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="herald",
        description="Herald - Email notifications for triggered alerts"
    )
    parser.add_argument(
        "-c", "--config",
        default="herald.yaml",
        help="Path to mail configuration file (default: herald.yaml)"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level (default: WARNING)"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file, rotated at 10MB"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Config commands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="subcommand")
    config_subparsers.add_parser("validate", help="Validate mail configuration file")

    # Action commands
    action_parser = subparsers.add_parser("action", help="Action definitions")
    action_subparsers = action_parser.add_subparsers(dest="subcommand")
    parse_parser = action_subparsers.add_parser("parse", help="Parse an action definition")
    parse_parser.add_argument("file", help="YAML or JSON action definition")
    parse_parser.add_argument(
        "-t", "--type",
        choices=list_action_types(),
        default="email",
        help="Action type (default: email)"
    )

    # Notify command
    notify_parser = subparsers.add_parser("notify", help="Send notification for a trigger result")
    notify_parser.add_argument("action_file", help="YAML or JSON action definition")
    notify_parser.add_argument("result_file", help="YAML or JSON trigger result")
    notify_parser.add_argument("-a", "--alert", required=True, help="Alert name")
    notify_parser.add_argument(
        "-t", "--type",
        choices=list_action_types(),
        default="email",
        help="Action type (default: email)"
    )

    args = parser.parse_args(argv)
    try:
        setup_logging(args.log_level, log_file=args.log_file)
    except ValueError as e:
        parser.error(str(e))

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "config":
        if args.subcommand == "validate":
            return cmd_config_validate(args)
        parser.print_help()
        return 0

    if args.command == "action":
        if args.subcommand == "parse":
            return cmd_action_parse(args)
        parser.print_help()
        return 0

    if args.command == "notify":
        return cmd_notify(args)

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
