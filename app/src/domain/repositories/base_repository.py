from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.transaction import in_transaction
from src.core.exceptions import errors
from src.core.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

IDType = UUID | str


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Base repository providing CRUD operations for SQLModel models.\n

    Automatically detects if operations are running within a transaction context
    and adjusts commit behavior accordingly.
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def _save_changes(self, refresh_obj=None):
        """
        Save changes to the database, respecting transaction context.

        If running within a transaction, just flush changes.
        If not in a transaction, commit changes.

        Args:
            refresh_obj: Object to refresh after saving changes
        """
        if in_transaction():
            await self.session.flush()
        else:
            await self.session.commit()

        if refresh_obj is not None:
            await self.session.refresh(refresh_obj)

    async def _discard_changes(self) -> None:
        # an enclosing Transaction owns the rollback
        if not in_transaction():
            await self.session.rollback()

    async def find_one_by_and_none(self, **kwargs: Any) -> ModelType | None:
        """
        Find a single record by field values (use AND condition).

        Args:
            **kwargs: Field names and values to filter by

        Returns:
            The found record or None
        """
        query = select(self.model)
        for field, value in kwargs.items():
            if hasattr(self.model, field):
                query = query.where(col(getattr(self.model, field)) == value)
        result = await self.session.exec(query)
        return result.one_or_none()

    async def find_one_by(self, id: IDType) -> ModelType | None:
        """
        Get a single record by ID.

        Args:
            id (IDType): The id of the record to retrieve

        Returns:
            ModelType | None: The found record or None
        """
        if not id:
            return None

        query = select(self.model).where(col(self.model.id) == id)  # type: ignore
        return (await self.session.exec(query)).one_or_none()

    async def create(self, schema: CreateSchemaType | dict[str, Any]) -> ModelType:
        """
        Create a new record.

        Args:
            schema: The data to create the record with

        Returns:
            The created record

        Raises:
            DatabaseError: If the insert fails
        """
        data = schema.model_dump() if isinstance(schema, BaseModel) else dict(schema)
        db_obj = self.model(**data)

        try:
            self.session.add(db_obj)
            await self._save_changes(refresh_obj=db_obj)
        except IntegrityError as e:
            await self._discard_changes()
            logger.exception(
                f"src.domain.repositories.base_repository.create:: integrity error creating {self.model.__name__}: {e}"
            )
            raise errors.DatabaseError(detail=f"{self.model.__name__} conflicts with an existing record") from e
        except SQLAlchemyError as e:
            await self._discard_changes()
            logger.exception(
                f"src.domain.repositories.base_repository.create:: error creating {self.model.__name__}: {e}"
            )
            raise errors.DatabaseError() from e

        return db_obj

    async def update_entity(self, entity: ModelType, schema: UpdateSchemaType | dict[str, Any]) -> ModelType:
        """
        Apply the set fields of ``schema`` to an already loaded entity.
        """
        updated_fields = schema.model_dump(exclude_unset=True) if isinstance(schema, BaseModel) else schema
        if not updated_fields:
            return entity

        entity.sqlmodel_update(updated_fields)

        try:
            self.session.add(entity)
            await self._save_changes(refresh_obj=entity)
        except SQLAlchemyError as e:
            await self._discard_changes()
            logger.exception(
                f"src.domain.repositories.base_repository.update_entity:: error updating {self.model.__name__}: {e}"
            )
            raise errors.DatabaseError() from e

        return entity

    async def delete(self, id: IDType) -> bool:
        """
        Delete a record by ID.

        Args:
            id: The id of the record to delete

        Returns:
            True if the record was deleted, False if not found
        """
        result = await self.find_one_by(id)

        if not result:
            return False

        try:
            await self.session.delete(result)
            await self._save_changes()
        except SQLAlchemyError as e:
            await self._discard_changes()
            logger.exception(
                f"src.domain.repositories.base_repository.delete:: error deleting {self.model.__name__} {id}: {e}"
            )
            raise errors.DatabaseError() from e

        return True

    async def exists(self, id: IDType) -> bool:
        """
        Check if a record exists by ID.
        """
        return await self.find_one_by(id) is not None

    async def count(self, **filters: Any) -> int:
        """
        Count records matching every ``field=value`` filter.
        """
        query = select(func.count()).select_from(self.model)
        for field, value in filters.items():
            if hasattr(self.model, field):
                query = query.where(col(getattr(self.model, field)) == value)

        result = await self.session.exec(query)
        return int(result.one())
