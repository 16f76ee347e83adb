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
"""Error classifier — maps finalizer results and raised failures to outcomes."""

from __future__ import annotations

from typing import Any

from finalizers.kernel.exceptions import (
    AbortFinalization,
    ConcurrencyException,
    RetryableFinalizationError,
)
from finalizers.lifecycle.outcome import (
    CONTINUE,
    Abort,
    Continue,
    Fatal,
    FinalizerOutcome,
    Retryable,
)

_OUTCOME_TYPES = (Continue, Abort, Retryable, Fatal)


class ErrorClassifier:
    """Decides retry vs. abort vs. fatal at the finalizer and job boundaries."""

    def classify(self, result: Any) -> FinalizerOutcome:
        """Normalise a finalizer return value or raised exception.

        ``None`` continues; tagged outcomes pass through unchanged.
        """
        if result is None:
            return CONTINUE
        if isinstance(result, _OUTCOME_TYPES):
            return result
        if isinstance(result, AbortFinalization):
            return Abort(str(result) or None)
        if isinstance(result, RetryableFinalizationError):
            return Retryable(str(result))
        if isinstance(result, BaseException):
            return Fatal(result)
        raise TypeError(
            f"Finalizer returned unsupported value {result!r}; "
            "return None or a Continue/Abort/Retryable/Fatal outcome"
        )

    @staticmethod
    def should_report(error: BaseException) -> bool:
        """Retryable conditions and abort signals are kept out of error reporting."""
        return not isinstance(
            error,
            (RetryableFinalizationError, ConcurrencyException, AbortFinalization),
        )
