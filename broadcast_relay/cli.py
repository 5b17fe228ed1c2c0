"""
Command line entry point

    broadcast-relay start      run the hub
    broadcast-relay connect    run an interactive peer
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console

from .client import PeerClient, make_display_console
from .exceptions import BindError, ConnectError, UsageError
from .hub import HubServer
from .shutdown import ShutdownCoordinator
from .utils import RelayConfig, configure_logging, get_logger

PROG = "broadcast-relay"
USAGE = f"Usage: {PROG} <start|connect>"
COMMANDS = ("start", "connect")

logger = get_logger("broadcast_relay.cli")


class RelayArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with 2"""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> RelayArgumentParser:
    parser = RelayArgumentParser(prog=PROG, usage=USAGE, add_help=False)
    parser.add_argument("command", nargs="?", help="start | connect")
    parser.add_argument("--host", help="hub bind address (start) or hub host (connect)")
    parser.add_argument("--port", type=int, help="port, overrides $PORT")
    parser.add_argument("--log-level", dest="log_level", help="logging level")
    return parser


async def run_hub(config: RelayConfig) -> int:
    """Run the hub until a shutdown signal

    Raises:
        BindError: the port is not available
    """
    shutdown = ShutdownCoordinator()
    hub = HubServer(config.hub_host, config.port, **config.transport_options())
    await hub.start()

    shutdown.register(hub.stop)
    shutdown.install()
    return await shutdown.wait()


async def run_peer(config: RelayConfig, console: Optional[Console] = None) -> int:
    """Run an interactive peer until the hub closes or a shutdown signal

    Raises:
        ConnectError: the hub could not be reached
    """
    shutdown = ShutdownCoordinator()
    peer = PeerClient(
        config.peer_url,
        shutdown,
        console=console or make_display_console(),
        **config.transport_options(),
    )
    await peer.connect()

    shutdown.register(peer.close)
    shutdown.install()
    peer.start()
    return await shutdown.wait()


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the selected mode and return the exit code"""
    stderr = Console(stderr=True, highlight=False)
    argv = sys.argv[1:] if argv is None else argv

    try:
        args = build_parser().parse_args(argv)
        if args.command is None:
            stderr.print(USAGE, markup=False)
            return 1

        command = args.command.lower()
        if command not in COMMANDS:
            stderr.print(f"Unknown command: {command}", markup=False)
            stderr.print(USAGE, markup=False)
            return 1

        config = RelayConfig.from_env()
        if command == "start":
            config.update(hub_host=args.host)
        else:
            config.update(peer_host=args.host)
        config.update(port=args.port, log_level=args.log_level)

    except UsageError as e:
        stderr.print(f"Error: {e.message}", markup=False)
        stderr.print(USAGE, markup=False)
        return 1

    configure_logging(
        level=config.log_level,
        log_file=config.log_file,
        enable_rich=config.enable_rich_logging,
    )

    try:
        if command == "start":
            return asyncio.run(run_hub(config))
        return asyncio.run(run_peer(config))
    except (BindError, ConnectError) as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 1
    except KeyboardInterrupt:
        # Interrupted before the signal handlers were installed
        return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
