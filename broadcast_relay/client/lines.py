"""Operator input source"""

import asyncio
import sys
import threading
from typing import Optional, TextIO

from ..utils import get_logger


class StdinLineSource:
    """Async iterator over lines typed by the operator

    A daemon thread does the blocking reads and hands each line to the event
    loop, so a pending read never keeps the process alive at exit. Iteration
    stops at end of input and cannot be restarted.
    """

    _EOF = object()

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self._queue: Optional[asyncio.Queue] = None
        self._thread: Optional[threading.Thread] = None
        self._finished = False
        self.logger = get_logger("broadcast_relay.client.lines")

    def _start(self) -> None:
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._thread = threading.Thread(
            target=self._read_loop, args=(loop,), name="stdin-reader", daemon=True
        )
        self._thread.start()

    def _read_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        try:
            for line in self.stream:
                if not self._hand_over(loop, line):
                    return
        except (OSError, ValueError) as e:
            # stdin closed underneath us
            self.logger.debug(f"Input stream closed: {e}")
        self._hand_over(loop, self._EOF)

    def _hand_over(self, loop: asyncio.AbstractEventLoop, item) -> bool:
        """Queue an item on the loop thread; False once the loop is closed"""
        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, item)
        except RuntimeError:
            self.logger.debug("Event loop closed, stopping input reader")
            return False
        return True

    def __aiter__(self) -> "StdinLineSource":
        return self

    async def __anext__(self) -> str:
        if self._finished:
            raise StopAsyncIteration
        if self._queue is None:
            self._start()

        line = await self._queue.get()
        if line is self._EOF:
            self._finished = True
            raise StopAsyncIteration
        return line.rstrip("\r\n")
