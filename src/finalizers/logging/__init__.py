"""Finalizers Logging — hexagonal logging port and structlog adapter."""

from finalizers.logging.port import LoggingPort
from finalizers.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StructlogAdapter"]
