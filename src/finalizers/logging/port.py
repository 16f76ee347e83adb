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
"""LoggingPort — how the engine installs logging for the finalizers library.

:meth:`FinalizationEngine.from_config` calls ``configure`` with the full
:class:`Config`; adapters read the ``finalizers.logging`` section:

- ``level.root``: level of the root logger (default ``INFO``).
- other ``level`` keys: per-logger overrides keyed by logger name, e.g.
  ``"finalizers.jobs.driver": DEBUG`` to see discarded jobs.
- ``format``: ``console`` or ``json``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from finalizers.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Logging backend used for retry, discard and failure records."""

    def configure(self, config: Config) -> None:
        """Install handlers and levels from the ``finalizers.logging`` section."""
        ...

    def get_logger(self, name: str) -> Any: ...

    def set_level(self, name: str, level: str) -> None:
        """Change one logger's level at runtime, e.g. ``finalizers.jobs.driver``."""
        ...
