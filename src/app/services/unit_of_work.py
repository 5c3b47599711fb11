"""Unit of Work Interface

One unit of work wraps one store transaction. Use cases commit once at the
end of a successful operation and roll back on any failure.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
