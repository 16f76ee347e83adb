# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Entity store and dependent repository built on SQLAlchemy 2.0 async sessions.

Writes are flushed, not committed; the caller owns the transaction.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from finalizers.kernel.exceptions import ConcurrencyException
from finalizers.lifecycle.entity import EntityState

T = TypeVar("T")


@asynccontextmanager
async def _conflicts_as_concurrency(model: type) -> AsyncIterator[None]:
    try:
        yield
    except StaleDataError as exc:
        raise ConcurrencyException(
            f"{model.__name__} was modified concurrently",
            code="STALE_DATA",
            context={"model": model.__name__},
        ) from exc
    except OperationalError as exc:
        if "deadlock" not in str(exc.orig).lower():
            raise
        raise ConcurrencyException(
            f"Deadlock while writing {model.__name__}",
            code="DEADLOCK",
            context={"model": model.__name__},
        ) from exc


class _SessionBound:
    def __init__(self, session: AsyncSession | None = None) -> None:
        self._session = session

    def _require_session(self) -> AsyncSession:
        """Return the session or raise if none is configured."""
        if self._session is None:
            raise RuntimeError("No AsyncSession configured")
        return self._session


class SqlAlchemyEntityStore(_SessionBound, Generic[T]):
    """:class:`~finalizers.data.ports.outbound.EntityStorePort` for a mapped model.

    Usage::

        store = SqlAlchemyEntityStore(Vehicle, session)
    """

    def __init__(self, model: type[T], session: AsyncSession | None = None) -> None:
        super().__init__(session)
        self._model = model

    @property
    def model(self) -> type[T]:
        return self._model

    async def find_by_id(self, id: Any) -> T | None:
        session = self._require_session()
        return await session.get(self._model, id)

    async def save(self, entity: T) -> T:
        """Persist an entity (insert or update) without application-level validation."""
        session = self._require_session()
        async with _conflicts_as_concurrency(self._model):
            session.add(entity)
            await session.flush()
        await session.refresh(entity)
        return entity

    async def delete(self, id: Any) -> bool:
        session = self._require_session()
        entity = await session.get(self._model, id)
        if entity is None:
            return False
        async with _conflicts_as_concurrency(self._model):
            await session.delete(entity)
            await session.flush()
        return True

    async def find_not_deleted(self, **filters: Any) -> list[T]:
        session = self._require_session()
        stmt = select(self._model).where(
            self._model.state != EntityState.DELETED.value  # type: ignore[attr-defined]
        )
        for key, value in filters.items():
            stmt = stmt.where(getattr(self._model, key) == value)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        session = self._require_session()
        result = await session.execute(select(func.count()).select_from(self._model))
        return cast(int, result.scalar_one())


class SqlAlchemyDependentRepository(_SessionBound):
    """Dependents of a parent, found through a foreign-key column on the child model.

    Args:
        model: Mapped class of the dependents.
        foreign_key: Column attribute on *model* holding the parent's id.
        session: Session shared with the parent's store.
    """

    def __init__(self, model: type, foreign_key: str, session: AsyncSession | None = None) -> None:
        super().__init__(session)
        self._model = model
        self._column = getattr(model, foreign_key)

    async def count(self, parent_id: Any) -> int:
        session = self._require_session()
        stmt = select(func.count()).select_from(self._model).where(self._column == parent_id)
        result = await session.execute(stmt)
        return cast(int, result.scalar_one())

    async def list_not_deleted(self, parent_id: Any) -> Sequence[Any]:
        session = self._require_session()
        stmt = select(self._model).where(
            self._column == parent_id,
            self._model.state != EntityState.DELETED.value,  # type: ignore[attr-defined]
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
