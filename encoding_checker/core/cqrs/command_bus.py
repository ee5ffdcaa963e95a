import logging
from typing import Any, Awaitable, Callable, Dict, Type

from encoding_checker.core.cqrs.command import Command

logger = logging.getLogger(__name__)


class CommandBus:
    """
    A simple command bus that dispatches commands to registered handlers.
    Every command type is handled by exactly one handler (1-to-1).
    """
    def __init__(self):
        self._handlers: Dict[Type[Command], Callable[[Command], Awaitable[Any]]] = {}

    def register(self, command_type: Type[Command], handler: Callable[[Command], Awaitable[Any]]):
        """
        Register a handler for a command type.
        Raises ValueError if a handler is already registered.
        """
        if command_type in self._handlers:
            logger.error(f"Handler for command '{command_type.__name__}' is already registered.")
            raise ValueError(f"Handler for command '{command_type.__name__}' is already registered.")

        self._handlers[command_type] = handler
        logger.debug(f"Handler {handler.__name__} registered for {command_type.__name__}")

    def is_registered(self, command_type: Type[Command]) -> bool:
        return command_type in self._handlers

    async def execute(self, command: Command) -> Any:
        """
        Execute a command by sending it to its registered handler.
        Raises ValueError if no handler is found. Errors raised by the handler
        (e.g. a rejected scan start) propagate unchanged to the caller.
        """
        handler = self._handlers.get(type(command))
        if not handler:
            logger.error(f"No handler registered for command '{type(command).__name__}'")
            raise ValueError(f"No handler registered for command '{type(command).__name__}'")

        return await handler(command)
