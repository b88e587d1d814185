"""
Command channel: web layer → polling actor.

Bounded FIFO on top of queue.Queue. Each command is delivered at most
once, in send order, to the single actor. Commands that need an answer
carry a concurrent.futures.Future the actor resolves.
"""

import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field

from .constants import COMMAND_QUEUE_SIZE
from .errors import ChannelError


@dataclass
class UpdateCredential:
    jwt: str
    reply: Future = field(default_factory=Future)


@dataclass
class ForcePoll:
    reply: Future = field(default_factory=Future)


@dataclass
class Shutdown:
    pass


# Returned by receive() once the channel is closed and drained
CLOSED = object()


class CommandChannel:
    def __init__(self, maxsize=COMMAND_QUEUE_SIZE):
        # One extra slot so close() can always enqueue CLOSED
        self._queue = queue.Queue(maxsize=maxsize + 1)
        self._maxsize = maxsize
        self._lock = threading.Lock()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, command):
        """Non-blocking send. Raises ChannelError if closed or full."""
        with self._lock:
            if self.closed:
                raise ChannelError("command channel is closed (actor not running)")
            if self._queue.qsize() >= self._maxsize:
                raise ChannelError("command channel is full (actor busy)")
            self._queue.put_nowait(command)

    def receive(self, timeout=None):
        """
        Next command, None on timeout, or CLOSED after close() once the
        queue has been drained.
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            if self.closed:
                return CLOSED
            return None

    def close(self):
        """Disconnect senders. Wakes a waiting receiver."""
        with self._lock:
            if self.closed:
                return
            self._closed.set()
            self._queue.put_nowait(CLOSED)

    def drain(self):
        """Take every command still queued, without waiting."""
        pending = []
        while True:
            try:
                cmd = self._queue.get_nowait()
            except queue.Empty:
                return pending
            if cmd is not CLOSED:
                pending.append(cmd)
