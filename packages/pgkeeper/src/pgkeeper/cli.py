"""Command line entry point: ``pgkeeper run`` and ``pgkeeper admin``."""

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Any

from pgkeeper import __version__
from pgkeeper.adapters.ports import EnvironmentNodeNameResolver
from pgkeeper.domain.exceptions import (
    CoordinatorInvariantError,
    DatabaseError,
    PgKeeperConfigError,
    PgKeeperError,
)
from pgkeeper.domain.settings import KeeperSettings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 1
EXIT_INVARIANT_ERROR = 2

LOG_FORMAT = "%(asctime)s\t%(name)s\t%(levelname)s\t%(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def get_argument_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="pgkeeper",
        description="PostgreSQL failover coordinator",
    )
    parser.add_argument(
        "--version",
        action="version",
        help="show program version",
        version=__version__,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", help="run the coordinator for the local server")
    run.add_argument("--config", type=Path, required=True, help="configuration file")

    admin = commands.add_parser("admin", help="administrative operations")
    source = admin.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", help="base URL of an admin HTTP endpoint")
    source.add_argument(
        "--config", type=Path, help="configuration file, to act on the registry directly"
    )
    admin.add_argument(
        "--registry-target",
        help="server holding the registry (with --config; defaults to the local server)",
    )
    actions = admin.add_subparsers(dest="action", required=True)

    add_node = actions.add_parser("add-node", help="register a reachable node")
    add_node.add_argument("name")
    add_node.add_argument("target", help="connection string of the node")

    remove_node = actions.add_parser("remove-node", help="remove a node")
    handle = remove_node.add_mutually_exclusive_group(required=True)
    handle.add_argument("--name")
    handle.add_argument("--sequence", type=int)

    actions.add_parser("list", help="list registered nodes")

    probe = actions.add_parser("probe", help="probe a connection target directly")
    probe.add_argument("target")

    notify = actions.add_parser("notify", help="notify the running coordinator")
    notify.add_argument("signal_name", nargs="?", default="reload_registry")

    return parser


def _load_settings(path: Path) -> KeeperSettings:
    from pgkeeper.usecases.settings_loader import SettingsLoader

    return SettingsLoader(EnvironmentNodeNameResolver()).load(path)


def run_coordinator(config_path: Path) -> int:
    """Run a coordinator until it is asked to stop."""
    from pgkeeper.adapters.posix_signals import (
        install_signal_handlers,
        restore_signal_handlers,
    )
    from pgkeeper.factories import create_coordinator
    from pgkeeper.usecases.settings_loader import SettingsLoader
    from pgkeeper.usecases.signal_relay import SignalRelay

    try:
        settings = _load_settings(config_path)
    except PgKeeperConfigError as e:
        print(f"pgkeeper: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(settings.log_level)
    if settings.metrics_enabled and settings.metrics_port is not None:
        from prometheus_client import start_http_server

        start_http_server(settings.metrics_port)
        logger.info(f"Serving metrics on port {settings.metrics_port}")

    loader = SettingsLoader(EnvironmentNodeNameResolver())
    relay = SignalRelay()
    try:
        coordinator = create_coordinator(
            settings,
            relay=relay,
            settings_loader=lambda: loader.load(config_path),
            on_settings_reloaded=lambda s: configure_logging(s.log_level),
        )
    except PgKeeperConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR
    except DatabaseError as e:
        logger.error(f"Cannot reach the local server: {e}")
        return EXIT_FAILED

    previous_handlers = install_signal_handlers(relay)
    try:
        coordinator.run()
    except CoordinatorInvariantError as e:
        logger.error(f"Coordinator stopped on invariant violation: {e}")
        return EXIT_INVARIANT_ERROR
    finally:
        restore_signal_handlers(previous_handlers)
    return EXIT_OK


def _admin_backend(arg: Namespace) -> Any:
    if arg.url:
        from pgkeeper.adapters.httpx_admin_client import HTTPXAdminClient

        return HTTPXAdminClient(arg.url)

    from pgkeeper.factories import create_cluster_admin

    settings = _load_settings(arg.config)
    configure_logging(settings.log_level)
    return create_cluster_admin(settings, registry_target=arg.registry_target)


def run_admin(arg: Namespace) -> int:
    """Run one administrative action and print its result."""
    try:
        admin = _admin_backend(arg)
        if arg.action == "add-node":
            ok = admin.add_node(arg.name, arg.target)
        elif arg.action == "remove-node":
            if arg.sequence is not None:
                ok = admin.remove_node_by_sequence(arg.sequence)
            else:
                ok = admin.remove_node(arg.name)
        elif arg.action == "list":
            for node in admin.list_nodes():
                print(
                    f"{node.sequence_number}\t{node.name}\t{node.role.value}\t"
                    f"{node.sync_state.value}\t{node.connection_target}"
                )
            return EXIT_OK
        elif arg.action == "probe":
            ok = admin.probe_node(arg.target)
        else:
            ok = admin.notify_coordinator(arg.signal_name)
    except PgKeeperError as e:
        print(f"pgkeeper: {e}", file=sys.stderr)
        return EXIT_FAILED

    print("ok" if ok else "failed")
    return EXIT_OK if ok else EXIT_FAILED


def main(args: list[str] | None = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = get_argument_parser()
    arg = parser.parse_args(args)

    if arg.command == "run":
        if not arg.config.is_file():
            print(f"pgkeeper: {str(arg.config)!r} doesn't exist", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        return run_coordinator(arg.config)
    return run_admin(arg)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
