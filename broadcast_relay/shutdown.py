"""Process shutdown coordination

Turns SIGINT/SIGTERM into one orderly close of whichever mode is running,
followed by exactly one exit.
"""

import asyncio
import inspect
import signal
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional, Union

from .utils import get_logger

CloseAction = Callable[[], Union[None, Awaitable[None]]]


class ShutdownState(Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    EXITED = "exited"


class ShutdownCoordinator:
    """One-shot shutdown latch

    Created once at startup and handed to the hub or the peer, which
    register their close action. The first signal runs that action and then
    exits; any further signal is ignored. ``exit`` is latched separately so
    that a peer closed by the hub and a signal arriving at the same time
    still produce a single exit.

    Usage:
        shutdown = ShutdownCoordinator()
        shutdown.register(hub.stop)
        shutdown.install()
        code = await shutdown.wait()
    """

    def __init__(self):
        self.state = ShutdownState.RUNNING
        self.exit_code: Optional[int] = None
        self._close_action: Optional[CloseAction] = None
        self._close_task: Optional[asyncio.Task] = None
        self._exited: Optional[asyncio.Event] = None
        self.logger = get_logger("broadcast_relay.shutdown")

    def _exit_event(self) -> asyncio.Event:
        # Created lazily so the event binds to the running loop
        if self._exited is None:
            self._exited = asyncio.Event()
        return self._exited

    def register(self, close_action: CloseAction) -> None:
        """Set the action run on the first shutdown request

        Args:
            close_action: sync or async callable taking no arguments
        """
        self._close_action = close_action

    def install(
        self, signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM)
    ) -> None:
        """Route the given signals to ``request_shutdown``"""
        loop = asyncio.get_running_loop()
        for sig in signals:
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig.name)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler
                signal.signal(
                    sig,
                    lambda signum, frame: loop.call_soon_threadsafe(
                        self.request_shutdown, signal.Signals(signum).name
                    ),
                )

    def request_shutdown(self, signame: str = "SIGTERM") -> bool:
        """Start the shutdown sequence

        Args:
            signame: name of the triggering signal, for logging

        Returns:
            True if this call started the sequence, False if one was already
            under way
        """
        if self.state is not ShutdownState.RUNNING:
            self.logger.debug(f"Ignoring {signame}: shutdown already in progress")
            return False

        self.state = ShutdownState.SHUTTING_DOWN
        self.logger.info(f"Received {signame}, shutting down")
        self._close_task = asyncio.ensure_future(self._run_close_action())
        return True

    async def _run_close_action(self) -> None:
        try:
            if self._close_action is not None:
                result = self._close_action()
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            self.logger.error(f"Error during shutdown: {e}")
        finally:
            self.exit(0)

    def exit(self, code: int = 0) -> bool:
        """Request process exit with the given code

        Returns:
            True for the first call, False afterwards
        """
        if self.exit_code is not None:
            return False

        self.exit_code = code
        self.state = ShutdownState.EXITED
        self._exit_event().set()
        return True

    async def wait(self) -> int:
        """Wait until exit is requested

        Returns:
            The exit code
        """
        await self._exit_event().wait()
        return self.exit_code
