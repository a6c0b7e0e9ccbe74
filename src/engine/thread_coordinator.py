"""Command queue between the HTTP threads and the meter engine thread.

Uvicorn serves requests on worker threads, but the trip lifecycle belongs to
the engine thread. Requests are turned into commands, queued here, and run by
the engine thread between simulation steps; the caller blocks until its
command has been answered or the timeout expires.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from queue import Empty, SimpleQueue
from typing import Any

logger = logging.getLogger(__name__)


class CommandType(str, Enum):
    """Operations the engine thread executes on behalf of other threads."""

    # Trip lifecycle
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    TOGGLE_PAUSE = "toggle_pause"
    RECORD_STOP = "record_stop"
    STOP = "stop"
    ACKNOWLEDGE_SUMMARY = "acknowledge_summary"
    SET_SELECTION = "set_selection"
    SET_MODIFIER = "set_modifier"

    # Location
    OBSERVE_FIX = "observe_fix"
    START_SIMULATION = "start_simulation"
    STOP_SIMULATION = "stop_simulation"

    # Reads
    GET_SNAPSHOT = "get_snapshot"
    GET_SUMMARY = "get_summary"

    SHUTDOWN = "shutdown"


CommandHandler = Callable[[dict[str, Any]], Any]


@dataclass
class Command:
    """One queued request and, once answered, its outcome."""

    type: CommandType
    payload: dict[str, Any] = field(default_factory=dict)
    response_event: threading.Event = field(default_factory=threading.Event)
    result: Any = None
    error: Exception | None = None

    @property
    def done(self) -> bool:
        return self.response_event.is_set()

    def resolve(self, result: Any) -> None:
        self.result = result
        self.response_event.set()

    def fail(self, error: Exception) -> None:
        self.error = error
        self.response_event.set()


class CommandTimeoutError(Exception):
    """The engine thread did not answer in time."""


class NoHandlerRegisteredError(Exception):
    """A command arrived for which the engine registered no handler."""


class ShutdownError(Exception):
    """The coordinator no longer accepts commands."""


class ThreadCoordinator:
    """Serializes commands from any thread onto the engine thread."""

    def __init__(self, timeout: float = 5.0) -> None:
        self._timeout = timeout
        self._queue: SimpleQueue[Command] = SimpleQueue()
        self._handlers: dict[CommandType, CommandHandler] = {}
        self._closed = threading.Event()

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def is_shutdown(self) -> bool:
        return self._closed.is_set()

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    def register_handler(self, command_type: CommandType, handler: CommandHandler) -> None:
        """Bind a handler; a later registration for the same type wins."""
        self._handlers[command_type] = handler

    def send_command(
        self,
        command_type: CommandType,
        payload: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Queue a command and block until the engine thread answers it.

        Exceptions raised by the handler are re-raised here, in the caller's
        thread.
        """
        if self.is_shutdown:
            raise ShutdownError("Meter engine is shut down")

        command = Command(type=command_type, payload=payload or {})
        self._queue.put(command)

        wait_for = self._timeout if timeout is None else timeout
        if not command.response_event.wait(timeout=wait_for):
            raise CommandTimeoutError(f"{command_type.value} not answered within {wait_for}s")

        if command.error is not None:
            raise command.error
        return command.result

    def process_pending_commands(self, limit: int | None = None) -> int:
        """Run queued commands on the calling thread. Returns how many ran."""
        processed = 0
        while limit is None or processed < limit:
            try:
                command = self._queue.get_nowait()
            except Empty:
                break
            self._execute(command)
            processed += 1
        return processed

    def shutdown(self) -> None:
        """Refuse new commands. Already-queued commands can still be drained."""
        self._closed.set()

    def _execute(self, command: Command) -> None:
        handler = self._handlers.get(command.type)
        if handler is None:
            command.fail(NoHandlerRegisteredError(f"No handler for {command.type.value}"))
            return
        try:
            command.resolve(handler(command.payload))
        except Exception as e:
            logger.debug("Command %s failed: %s", command.type.value, e)
            command.fail(e)
