"""headerguard logging — logging port and structlog adapter."""

from headerguard.logging.port import LoggingPort
from headerguard.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StructlogAdapter"]
