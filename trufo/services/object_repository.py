"""Object repository — persistence for StoredObject records."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from trufo.errors import StorageUnavailable
from trufo.models.stored_object import StoredObject

logger = logging.getLogger(__name__)

STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


class ObjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _storage(self, action: str) -> AsyncIterator[None]:
        try:
            yield
        except STORAGE_ERRORS as exc:
            logger.exception("Storage failure during %s", action)
            try:
                await self.db.rollback()
            except SQLAlchemyError as rollback_exc:
                logger.warning("Rollback after %s failed: %s", action, rollback_exc)
            raise StorageUnavailable(f"Storage unavailable during {action}") from exc

    async def insert_or_replace(self, record: StoredObject) -> StoredObject:
        async with self._storage("insert_or_replace"):
            merged = await self.db.merge(record)
            await self.db.commit()
            return merged

    async def get_by_id(self, object_id: str) -> StoredObject | None:
        async with self._storage("get_by_id"):
            return await self.db.get(StoredObject, object_id)

    async def find_by_name(self, name: str) -> list[StoredObject]:
        """All records sharing ``name``; names are not unique."""
        stmt = select(StoredObject).where(StoredObject.name == name).order_by(StoredObject.created_at)
        async with self._storage("find_by_name"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def find_by_token(self, token: str) -> StoredObject | None:
        stmt = select(StoredObject).where(StoredObject.token == token).limit(1)
        async with self._storage("find_by_token"):
            result = await self.db.execute(stmt)
            return result.scalars().first()

    async def list_by_owner(self, owner_email: str) -> list[StoredObject]:
        stmt = (
            select(StoredObject)
            .where(StoredObject.owner_email == owner_email)
            .order_by(StoredObject.created_at.desc())
        )
        async with self._storage("list_by_owner"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def list_all(self) -> list[StoredObject]:
        stmt = select(StoredObject).order_by(StoredObject.created_at)
        async with self._storage("list_all"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def delete(self, object_id: str) -> None:
        """Delete by id; deleting an absent id is a no-op."""
        async with self._storage("delete"):
            await self.db.execute(delete(StoredObject).where(StoredObject.id == object_id))
            await self.db.commit()
