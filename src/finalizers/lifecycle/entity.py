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
"""Entity state and helpers shared by every managed entity type.

Any object with ``id`` and ``state`` attributes can be managed. ``state_at``
and ``delete_at`` are optional and detected structurally.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from finalizers.kernel.types import FieldError

_ERRORS_ATTR = "errors"


class EntityState(StrEnum):
    """Lifecycle state of a managed entity. Only ``ACTIVE -> DELETED`` is allowed."""

    ACTIVE = "active"
    DELETED = "deleted"


@runtime_checkable
class Finalizable(Protocol):
    """Structural contract for entities managed by the lifecycle controller."""

    id: Any
    state: str


def is_deleted(entity: Any) -> bool:
    """Return ``True`` when *entity* has been erased (logically deleted)."""
    return entity.state == EntityState.DELETED


def errors_of(entity: Any) -> list[FieldError]:
    """Return the validation errors attached to *entity*, creating the list if needed."""
    errors = getattr(entity, _ERRORS_ATTR, None)
    if errors is None:
        errors = []
        setattr(entity, _ERRORS_ATTR, errors)
    return errors


@dataclass(eq=False)
class FinalizableEntity:
    """Plain dataclass base for entities kept in non-relational stores.

    Subclasses add their own fields; every field they add needs a default.
    """

    id: Any = field(default_factory=uuid.uuid4)
    state: str = EntityState.ACTIVE
    state_at: datetime | None = None
    delete_at: datetime | None = None
    errors: list[FieldError] = field(default_factory=list, repr=False)

    @property
    def is_deleted(self) -> bool:
        return self.state == EntityState.DELETED
