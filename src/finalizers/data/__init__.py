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
"""Finalizers Data — persistence ports for managed entities and their dependents.

Adapters:
    - **In-memory** (``finalizers.data.adapters.memory``) — dict-backed, for tests and tools.
    - **Relational** (``finalizers.data.relational.sqlalchemy``) — SQLAlchemy async ORM.
"""

from __future__ import annotations

from finalizers.data.ports.outbound import DependentRepositoryPort, EntityStorePort

__all__ = [
    "DependentRepositoryPort",
    "EntityStorePort",
]
