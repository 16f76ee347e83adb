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
"""Structured error value types shared across the library.

All types use only the Python standard library.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

BASE_FIELD = "base"


@dataclass(frozen=True)
class FieldError:
    """Describes a validation error on a single field.

    ``field`` is :data:`BASE_FIELD` for errors about the entity as a whole.
    """

    field: str
    message: str
    rejected_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}

    def __str__(self) -> str:
        if self.field == BASE_FIELD:
            return self.message
        return f"{self.field} {self.message}"
