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
"""Declarative base and mixins for finalizable SQLAlchemy entities."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

from finalizers.lifecycle.entity import EntityState


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for finalizable entities."""


class FinalizableMixin:
    """Mixin adding the lifecycle columns managed by the controller.

    ``state`` only moves from ``active`` to ``deleted``. Erased rows stay in
    the table until their finalize job physically removes them.
    """

    __abstract__ = True

    state: Mapped[str] = mapped_column(
        String(16),
        default=EntityState.ACTIVE.value,
        nullable=False,
        index=True,
    )
    state_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None, nullable=True)
    delete_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None, nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.state == EntityState.DELETED


class VersionedMixin:
    """Mixin that enables optimistic locking via a ``version`` column.

    A concurrent modification makes the flush fail; the entity store turns
    that into :class:`~finalizers.kernel.exceptions.ConcurrencyException` so
    the finalize job is retried with the conflict policy.
    """

    __abstract__ = True

    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    @declared_attr  # type: ignore[arg-type]
    def __mapper_args__(cls) -> dict[str, Any]:  # noqa: N805
        return {"version_id_col": cls.version}
