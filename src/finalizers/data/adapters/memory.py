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
"""In-memory implementations of the data ports.

Records live in a plain ``dict`` keyed by entity id, making these adapters
the zero-dependency default for tests and single-process tools. **All state
is lost on process restart.**

Entities are stored by reference: the object handed to :meth:`save` is the
one returned by :meth:`find_by_id`, so a re-resolved entity observes
in-place changes made by finalizers.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from finalizers.lifecycle.entity import EntityState

T = TypeVar("T")


class InMemoryEntityStore(Generic[T]):
    """In-memory :class:`~finalizers.data.ports.outbound.EntityStorePort`."""

    def __init__(self) -> None:
        self._records: dict[Any, T] = {}

    # -- EntityStorePort ----------------------------------------------------

    async def find_by_id(self, id: Any) -> T | None:
        return self._records.get(id)

    async def save(self, entity: T) -> T:
        self._records[entity.id] = entity  # type: ignore[attr-defined]
        return entity

    async def delete(self, id: Any) -> bool:
        return self._records.pop(id, None) is not None

    async def find_not_deleted(self, **filters: Any) -> list[T]:
        return [
            e
            for e in self._matching(**filters)
            if e.state != EntityState.DELETED  # type: ignore[attr-defined]
        ]

    async def count(self) -> int:
        return len(self._records)

    # -- helpers ------------------------------------------------------------

    async def find_all(self, **filters: Any) -> list[T]:
        """Every stored record, including erased ones."""
        return self._matching(**filters)

    def _matching(self, **filters: Any) -> list[T]:
        return [
            e
            for e in self._records.values()
            if all(getattr(e, key) == value for key, value in filters.items())
        ]


class InMemoryDependentRepository:
    """Dependents of a parent, found through a foreign-key attribute on the child.

    Args:
        store: Store holding the dependent entities.
        foreign_key: Attribute on each dependent holding its parent's id.
    """

    def __init__(self, store: InMemoryEntityStore[Any], foreign_key: str) -> None:
        self._store = store
        self._foreign_key = foreign_key

    async def count(self, parent_id: Any) -> int:
        return len(await self._store.find_all(**{self._foreign_key: parent_id}))

    async def list_not_deleted(self, parent_id: Any) -> Sequence[Any]:
        return await self._store.find_not_deleted(**{self._foreign_key: parent_id})
