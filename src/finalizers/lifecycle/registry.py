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
"""Entity type registry — index of definitions by name and by entity class."""

from __future__ import annotations

from typing import Any

from finalizers.kernel.exceptions import DefinitionValidationError, EntityTypeNotRegisteredError
from finalizers.lifecycle.definition import EntityTypeDefinition


class EntityTypeRegistry:
    """Holds every :class:`EntityTypeDefinition` known to one engine.

    Jobs carry only a type name, so the name is the primary key. Instances are
    resolved through their class (walking the MRO, so subclasses of a
    registered class share its definition unless registered themselves).
    """

    def __init__(self) -> None:
        self._by_name: dict[str, EntityTypeDefinition] = {}
        self._by_class: dict[type, EntityTypeDefinition] = {}

    def register(self, definition: EntityTypeDefinition) -> EntityTypeDefinition:
        """Add *definition*.

        Raises:
            DefinitionValidationError: If its name or entity class is taken.
        """
        if definition.name in self._by_name:
            msg = f"Entity type '{definition.name}' is already registered"
            raise DefinitionValidationError(msg)
        if definition.entity_class in self._by_class:
            other = self._by_class[definition.entity_class].name
            msg = f"{definition.entity_class.__qualname__} is already registered as '{other}'"
            raise DefinitionValidationError(msg)
        self._by_name[definition.name] = definition
        self._by_class[definition.entity_class] = definition
        return definition

    def get(self, name: str) -> EntityTypeDefinition | None:
        return self._by_name.get(name)

    def require(self, name: str) -> EntityTypeDefinition:
        """Look up a definition by name.

        Raises:
            EntityTypeNotRegisteredError: If nothing is registered under *name*.
        """
        definition = self._by_name.get(name)
        if definition is None:
            raise EntityTypeNotRegisteredError(
                f"Entity type '{name}' is not registered",
                context={"entity_type": name},
            )
        return definition

    def for_entity(self, entity: Any) -> EntityTypeDefinition:
        """Definition managing *entity*.

        Raises:
            EntityTypeNotRegisteredError: If no class in its MRO is registered.
        """
        for cls in type(entity).__mro__:
            definition = self._by_class.get(cls)
            if definition is not None:
                return definition
        raise EntityTypeNotRegisteredError(
            f"{type(entity).__qualname__} is not a registered entity type",
            context={"entity_class": type(entity).__qualname__},
        )

    def get_all(self) -> list[EntityTypeDefinition]:
        return list(self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)
