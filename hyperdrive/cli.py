"""CLI entry point for hyperdrive.

Handles argument parsing and dispatches to enter or follow mode.
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from hyperdrive.client import Hyperdrive
from hyperdrive.config_loader import ConfigError, load_client_config
from hyperdrive.deserializers import ContentTypeDeserializer, Deserializer
from hyperdrive.models import ClientConfig
from hyperdrive.results import Failure, HyperdriveError, Result

DEFAULT_TIMEOUT = 30.0


def positive_float(value: str) -> float:
    """Parse and validate a positive float value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive number.
    """
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


def parse_key_value(value: str) -> tuple[str, Any]:
    """Parse NAME=VALUE format.

    VALUE is decoded as JSON when possible (so count=5 is a number and
    tags=["a"] a list), otherwise it is kept as a string.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid format '{value}'. Expected NAME=VALUE (e.g., 'id=5')"
        )
    name, raw = value.split("=", 1)
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid format '{value}'. Name cannot be empty.")
    try:
        return name, json.loads(raw)
    except ValueError:
        return name, raw


@dataclass
class EnterArgs:
    """Parsed arguments for enter mode."""

    uri: str
    config: Path | None
    deserializer: str | None
    timeout: float | None
    verbose: bool


@dataclass
class FollowArgs:
    """Parsed arguments for follow mode."""

    uri: str
    transition: str
    parameters: dict[str, Any]
    attributes: dict[str, Any] | None
    config: Path | None
    deserializer: str | None
    timeout: float | None
    verbose: bool


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to client configuration YAML",
    )
    parser.add_argument(
        "--deserializer",
        default=None,
        metavar="MODULE:ATTR",
        help="Deserializer callable taking (response, body), e.g. 'mypkg.hal:deserialize'",
    )
    parser.add_argument(
        "--timeout",
        type=positive_float,
        default=None,
        help=f"Request timeout in seconds (default: config value or {DEFAULT_TIMEOUT})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log requests and masked failures to stderr",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with enter and follow subcommands."""
    parser = argparse.ArgumentParser(
        prog="hyperdrive",
        description="Hypermedia API client: enter an API and follow its transitions.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Execution mode")

    enter_parser = subparsers.add_parser(
        "enter",
        help="Fetch the root of a hypermedia API and print its representor",
    )
    enter_parser.add_argument("uri", help="Root URI of the API")
    _add_common_arguments(enter_parser)

    follow_parser = subparsers.add_parser(
        "follow",
        help="Enter an API and follow one transition of its root representor",
    )
    follow_parser.add_argument("uri", help="Root URI of the API")
    follow_parser.add_argument("transition", help="Name of the transition to follow")
    follow_parser.add_argument(
        "--param",
        type=parse_key_value,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        dest="param",
        help="URI template parameter (can be repeated)",
    )
    follow_parser.add_argument(
        "--attribute",
        type=parse_key_value,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        dest="attribute",
        help="Request body attribute (can be repeated)",
    )
    _add_common_arguments(follow_parser)

    return parser


def parse_enter_args(namespace: argparse.Namespace) -> EnterArgs:
    """Convert parsed namespace to EnterArgs dataclass."""
    return EnterArgs(
        uri=namespace.uri,
        config=namespace.config,
        deserializer=namespace.deserializer,
        timeout=namespace.timeout,
        verbose=namespace.verbose,
    )


def parse_follow_args(namespace: argparse.Namespace) -> FollowArgs:
    """Convert parsed namespace to FollowArgs dataclass."""
    return FollowArgs(
        uri=namespace.uri,
        transition=namespace.transition,
        parameters=dict(namespace.param or []),
        attributes=dict(namespace.attribute) if namespace.attribute else None,
        config=namespace.config,
        deserializer=namespace.deserializer,
        timeout=namespace.timeout,
        verbose=namespace.verbose,
    )


def parse_args(args: list[str] | None = None) -> EnterArgs | FollowArgs:
    """Parse command-line arguments and return typed args dataclass.

    Args:
        args: Command-line arguments to parse. If None, uses sys.argv[1:].

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "enter":
        return parse_enter_args(namespace)
    return parse_follow_args(namespace)


def load_deserializer(reference: str | None) -> Deserializer:
    """Import a deserializer from a 'module:attribute' reference.

    Without a reference, a ContentTypeDeserializer with no registered formats
    is returned (every body reads as an empty representor).

    Raises:
        ConfigError: If the reference is malformed or cannot be imported.
    """
    if reference is None:
        return ContentTypeDeserializer()

    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigError(f"Invalid deserializer '{reference}'. Expected MODULE:ATTR")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import deserializer module '{module_name}': {e}") from e

    deserializer = getattr(module, attribute, None)
    if deserializer is None or not callable(deserializer):
        raise ConfigError(f"'{attribute}' in module '{module_name}' is not a callable")
    return deserializer


def _load_config(args: EnterArgs | FollowArgs) -> ClientConfig:
    config = load_client_config(args.config) if args.config else ClientConfig()
    if args.timeout is not None:
        config = config.model_copy(update={"timeout": args.timeout})
    return config


def _print_failure(result: Failure) -> None:
    error = result.error
    if isinstance(error, HyperdriveError):
        print(f"Error: {error.message} (domain={error.domain}, code={error.code})", file=sys.stderr)
    else:
        print(f"Error: {error}", file=sys.stderr)


def _print_result(result: Result) -> int:
    if isinstance(result, Failure):
        _print_failure(result)
        return 1
    print(result.value.model_dump_json(indent=2))
    return 0


def main() -> int:
    """Main entry point."""
    try:
        parsed = parse_args()

        logging.basicConfig(
            level=logging.DEBUG if parsed.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        if isinstance(parsed, EnterArgs):
            return run_enter(parsed)
        return run_follow(parsed)

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


def run_enter(args: EnterArgs, transport: httpx.BaseTransport | None = None) -> int:
    """Run enter mode: print the root representor of the API."""
    try:
        config = _load_config(args)
        deserializer = load_deserializer(args.deserializer)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with Hyperdrive(config, deserializer=deserializer, transport=transport) as hyperdrive:
        return _print_result(hyperdrive.enter(args.uri))


def run_follow(args: FollowArgs, transport: httpx.BaseTransport | None = None) -> int:
    """Run follow mode: enter the API, then follow one root transition."""
    try:
        config = _load_config(args)
        deserializer = load_deserializer(args.deserializer)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with Hyperdrive(config, deserializer=deserializer, transport=transport) as hyperdrive:
        root = hyperdrive.enter(args.uri)
        if isinstance(root, Failure):
            _print_failure(root)
            return 1

        transition = root.value.transitions.get(args.transition)
        if transition is None:
            available = ", ".join(sorted(root.value.transitions)) or "(none)"
            print(
                f"Error: Transition '{args.transition}' not found. Available: {available}",
                file=sys.stderr,
            )
            return 1

        result = hyperdrive.request(transition, args.parameters, args.attributes)
        return _print_result(result)


if __name__ == "__main__":
    sys.exit(main())
