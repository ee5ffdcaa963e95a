from abc import ABC, abstractmethod
from typing import Generic, TypeVar

TQuery = TypeVar('TQuery', bound='Query')
TResult = TypeVar('TResult')


class Query(ABC):
    """
    Base class for all queries.
    A query is a DTO asking for data. It never changes the state of a scan.
    """
    pass


class QueryHandler(Generic[TQuery, TResult], ABC):
    """Base interface for query handlers."""
    @abstractmethod
    async def handle(self, query: TQuery) -> TResult:
        """Handle the given query and return its result."""
        raise NotImplementedError
