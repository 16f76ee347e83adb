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
"""Start/stop protocol for infrastructure adapters.

Job queues and other adapters that own workers, connections or timers
implement this protocol. :class:`~finalizers.engine.FinalizationEngine`
calls ``start()`` when it starts and ``stop()`` when it stops.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for infrastructure adapters."""

    async def start(self) -> None:
        """Acquire resources and begin processing.

        Raise if the adapter cannot start; the engine does not retry.
        """
        ...

    async def stop(self) -> None:
        """Release resources.

        Best-effort cleanup: jobs still held in memory may be dropped.
        """
        ...
