"""
Base Repository for SalesAI Trainer

Generic async repository with the operations every table shares.
Repositories never commit; the session scope opened by the route commits
once when the operation finishes (see DatabaseManager.session).
"""

from typing import TypeVar, Generic, Type

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic async repository.

    Args:
        model: The SQLModel table class to operate on
        session: Async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    async def add(self, obj: ModelType) -> ModelType:
        """
        Insert a new record and load server-generated values.

        Args:
            obj: Unsaved table model instance

        Returns:
            The same instance, refreshed
        """
        self._session.add(obj)
        await self._session.flush()
        await self._session.refresh(obj)
        return obj
