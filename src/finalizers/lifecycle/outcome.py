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
"""Tagged finalizer outcomes — Continue, Abort, Retryable, Fatal.

A finalizer reports how the pipeline should proceed by returning one of these
values (``None`` counts as :class:`Continue`). Raising is still supported and
is normalised into the same values by
:class:`~finalizers.lifecycle.classifier.ErrorClassifier`.

Example::

    async def release_bucket(entity, ctx):
        if entity.bucket_id is None:
            return CONTINUE
        if not await storage.delete_bucket(entity.bucket_id):
            return Retryable(f"bucket {entity.bucket_id} still draining")
        entity.bucket_id = None
        await ctx.definition.store.save(entity)
        return CONTINUE
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class OutcomeKind(StrEnum):
    """Discriminator shared by all outcome types."""

    CONTINUE = "CONTINUE"
    ABORT = "ABORT"
    RETRYABLE = "RETRYABLE"
    FATAL = "FATAL"


@dataclass(frozen=True)
class Continue:
    """The finalizer succeeded; run the next one."""

    kind: OutcomeKind = OutcomeKind.CONTINUE


@dataclass(frozen=True)
class Abort:
    """Stop the pipeline quietly: no destroy, no retry, no error report."""

    reason: str | None = None
    kind: OutcomeKind = OutcomeKind.ABORT


@dataclass(frozen=True)
class Retryable:
    """Expected, recoverable condition; the finalize job is rescheduled."""

    reason: str
    kind: OutcomeKind = OutcomeKind.RETRYABLE


@dataclass(frozen=True)
class Fatal:
    """Unrecoverable failure; surfaces to error reporting."""

    error: BaseException
    kind: OutcomeKind = OutcomeKind.FATAL


FinalizerOutcome = Continue | Abort | Retryable | Fatal

CONTINUE = Continue()
ABORT = Abort()
