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
"""Tests for the in-memory entity store and dependent repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from finalizers.data.adapters.memory import InMemoryDependentRepository, InMemoryEntityStore
from finalizers.data.ports.outbound import DependentRepositoryPort, EntityStorePort
from finalizers.lifecycle.entity import EntityState, FinalizableEntity


@dataclass(eq=False)
class Invoice(FinalizableEntity):
    customer_id: Any = None
    total: int = 0


@pytest.fixture
def store() -> InMemoryEntityStore[Invoice]:
    return InMemoryEntityStore()


class TestInMemoryEntityStore:
    def test_implements_port(self, store):
        assert isinstance(store, EntityStorePort)

    @pytest.mark.asyncio
    async def test_save_and_find_returns_same_object(self, store):
        invoice = await store.save(Invoice(total=10))
        found = await store.find_by_id(invoice.id)
        assert found is invoice

    @pytest.mark.asyncio
    async def test_find_missing_returns_none(self, store):
        assert await store.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_delete_reports_whether_removed(self, store):
        invoice = await store.save(Invoice())
        assert await store.delete(invoice.id) is True
        assert await store.delete(invoice.id) is False
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_find_not_deleted_filters_state_and_attributes(self, store):
        kept = await store.save(Invoice(customer_id=1))
        await store.save(Invoice(customer_id=1, state=EntityState.DELETED))
        await store.save(Invoice(customer_id=2))

        found = await store.find_not_deleted(customer_id=1)
        assert found == [kept]

    @pytest.mark.asyncio
    async def test_find_all_includes_erased(self, store):
        await store.save(Invoice(customer_id=1))
        await store.save(Invoice(customer_id=1, state=EntityState.DELETED))
        assert len(await store.find_all(customer_id=1)) == 2


class TestInMemoryDependentRepository:
    @pytest.mark.asyncio
    async def test_count_includes_erased_but_listing_excludes_them(self, store):
        repo = InMemoryDependentRepository(store, "customer_id")
        assert isinstance(repo, DependentRepositoryPort)

        live = await store.save(Invoice(customer_id=7))
        await store.save(Invoice(customer_id=7, state=EntityState.DELETED))
        await store.save(Invoice(customer_id=8))

        assert await repo.count(7) == 2
        assert list(await repo.list_not_deleted(7)) == [live]
        assert await repo.count(9) == 0
