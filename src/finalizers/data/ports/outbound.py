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
"""Outbound ports: entity store and dependent repository interfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class EntityStorePort(Protocol[T]):
    """Persistence for one managed entity type.

    ``save`` must persist ``state``, ``state_at`` and ``delete_at`` as given,
    without running application-level validation.
    """

    async def find_by_id(self, id: Any) -> T | None: ...

    async def save(self, entity: T) -> T: ...

    async def delete(self, id: Any) -> bool:
        """Physically remove the record. Returns ``False`` if nothing was removed."""
        ...

    async def find_not_deleted(self, **filters: Any) -> list[T]: ...

    async def count(self) -> int: ...


@runtime_checkable
class DependentRepositoryPort(Protocol):
    """Access to the dependents of a parent entity through one association."""

    async def count(self, parent_id: Any) -> int:
        """Count dependents, including erased ones not yet destroyed."""
        ...

    async def list_not_deleted(self, parent_id: Any) -> Sequence[Any]: ...
