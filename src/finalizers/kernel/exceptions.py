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
"""Unified exception hierarchy for finalizers.

All library exceptions inherit from FinalizersException, enabling unified
error handling across modules.

Categories:
- BusinessException: Lifecycle rule violations, validation errors
- FinalizationException: Outcomes of the asynchronous finalization phase
- ConfigurationException: Invalid entity type definitions or lookups

:class:`AbortFinalization` is deliberately *not* part of this hierarchy: it is
a control signal a finalizer raises to stop the pipeline without failing.
"""

from __future__ import annotations

from finalizers.kernel.types import FieldError


# =============================================================================
# Base Exception
# =============================================================================


class FinalizersException(Exception):
    """Base exception for all finalizers errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "FINALIZE_RETRY").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(FinalizersException):
    """Lifecycle rule violations."""


class ValidationException(BusinessException):
    """Validation failures, carrying the offending field errors."""

    def __init__(
        self,
        message: str,
        errors: list[FieldError] | None = None,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code=code, context=context)
        self.errors: list[FieldError] = list(errors or [])


class IllegalStateTransition(ValidationException):
    """An entity's state was asked to move backwards (``deleted -> active``)."""


class IllegalDirectDestroy(BusinessException):
    """``destroy()`` was called without ``force=True``.

    Physical removal must flow through finalization; only forced paths
    (the finalizer pipeline, tests) may destroy directly.
    """


class ConcurrencyException(BusinessException):
    """Concurrent modification conflict (deadlock, optimistic locking failure)."""


# =============================================================================
# Finalization Exceptions
# =============================================================================


class FinalizationException(FinalizersException):
    """Failures raised while driving an entity to destruction."""


class RetryableFinalizationError(FinalizationException):
    """Expected, recoverable condition; the finalize job is rescheduled.

    Typical causes are dependents still present or a transient failure in an
    external API that the finalizer signals explicitly. Never sent to error
    reporting.
    """


class FatalFinalizationError(FinalizationException):
    """Unclassified failure; surfaces to error reporting and the job transport."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(FinalizersException):
    """Invalid configuration of the finalization system."""


class DefinitionValidationError(ConfigurationException):
    """An entity type definition is incomplete or inconsistent."""


class EntityTypeNotRegisteredError(ConfigurationException):
    """No entity type definition is registered under the requested name or class."""


# =============================================================================
# Control Signals
# =============================================================================


class AbortFinalization(Exception):  # noqa: N818
    """Signal raised by a finalizer or destroy hook to halt without error.

    No retry is scheduled and nothing is destroyed; the entity stays in the
    ``deleted``-but-undestroyed state until something re-triggers its job.
    """
