from abc import ABC, abstractmethod
from typing import Generic, TypeVar

# TCommand is bound to subclasses of Command
TCommand = TypeVar('TCommand', bound='Command')
# A command does not always return something
TResult = TypeVar('TResult')


class Command(ABC):
    """Base class for all commands. A command is a DTO describing a write action (start, cancel)."""
    pass


class CommandHandler(Generic[TCommand, TResult], ABC):
    """
    Base class for a command handler.
    Takes one specific TCommand and (optionally) returns a TResult.
    """
    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """Handle the given command."""
        raise NotImplementedError
