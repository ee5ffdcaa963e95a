import logging
from typing import Any, Awaitable, Callable, Dict, Type

from encoding_checker.core.cqrs.query import Query

logger = logging.getLogger(__name__)


class QueryBus:
    """
    A simple, asynchronous query bus (Mediator pattern).

    Routes a query to exactly one registered handler.
    """

    def __init__(self):
        self._handlers: Dict[Type[Query], Callable[[Query], Awaitable[Any]]] = {}

    def register(self, query_type: Type[Query], handler: Callable[[Query], Awaitable[Any]]):
        """
        Register one handler for one query type.

        Raises ValueError if a handler is already registered for the query,
        to enforce the 1-to-1 rule.
        """
        if query_type in self._handlers:
            logger.error(f"A handler for query '{query_type.__name__}' is already registered.")
            raise ValueError(f"Handler for query '{query_type.__name__}' is already registered.")

        self._handlers[query_type] = handler
        logger.debug(f"Handler '{handler.__name__}' registered for '{query_type.__name__}'")

    def is_registered(self, query_type: Type[Query]) -> bool:
        return query_type in self._handlers

    async def execute(self, query: Query) -> Any:
        """
        Execute a query by calling its registered handler and return the result.
        Raises ValueError if no handler is found.
        """
        query_type = type(query)
        handler = self._handlers.get(query_type)

        if not handler:
            logger.error(f"No handler found for query '{query_type.__name__}'")
            raise ValueError(f"No handler registered for query '{query_type.__name__}'")

        logger.debug(f"Executing query '{query_type.__name__}' with handler '{handler.__name__}'")

        try:
            return await handler(query)
        except Exception as e:
            # Log, but let the error reach the caller (the API) so it can map it to a response
            logger.error(
                f"Error in handler '{handler.__name__}' while executing '{query_type.__name__}': {e}",
                exc_info=True
            )
            raise
