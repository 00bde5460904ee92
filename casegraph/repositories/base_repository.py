from typing import Any, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from casegraph.utils.logging import get_logger

# Define a generic type for SQLAlchemy models
ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Case-scoped CRUD operations shared by the case graph tables.

    Every managed model has ``case_id`` and ``dedup_key`` columns.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def get_by_dedup_key(self, case_id: UUID, dedup_key: str) -> Optional[ModelType]:
        """Get a record by its case and dedup key.

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(
                self.model.case_id == case_id,
                self.model.dedup_key == dedup_key,
            )
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by dedup key {dedup_key}: {str(e)}",
                exc_info=True,
            )
            raise

    async def list_by_case(self, case_id: UUID) -> List[ModelType]:
        try:
            query = select(self.model).where(self.model.case_id == case_id).order_by(self.model.created_at)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error listing {self.model.__name__} for case {case_id}: {str(e)}",
                exc_info=True,
            )
            raise

    async def max_value(self, column_name: str, **filters: Any) -> Optional[Any]:
        """Maximum of one column over the records matching equality filters."""
        try:
            query = select(func.max(getattr(self.model, column_name)))
            for field, value in filters.items():
                query = query.where(getattr(self.model, field) == value)
            result = await self.session.execute(query)
            return result.scalar()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error computing max {column_name} on {self.model.__name__}: {str(e)}",
                exc_info=True,
            )
            raise

    async def create(self, **kwargs) -> ModelType:
        """Create and commit a new record.

        Raises:
            IntegrityError: When a unique constraint rejects the row
        """
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            await self.session.commit()
            return instance
        except IntegrityError:
            self.logger.warning(
                f"Unique constraint rejected {self.model.__name__}",
                extra={"dedup_key": kwargs.get("dedup_key")},
            )
            raise
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True,
            )
            raise
