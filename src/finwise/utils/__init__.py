"""Utility modules."""
from .logger import get_logger, set_log_level, set_run_context
from .exceptions import (
    FinWiseError,
    ConfigError,
    LLMError,
    LLMTransportError,
    InvalidJSONError,
    MalformedResponseError,
    StorageError,
    FileValidationError,
    PDFError,
    InvalidTransitionError
)

__all__ = [
    "get_logger",
    "set_log_level",
    "set_run_context",
    "FinWiseError",
    "ConfigError",
    "LLMError",
    "LLMTransportError",
    "InvalidJSONError",
    "MalformedResponseError",
    "StorageError",
    "FileValidationError",
    "PDFError",
    "InvalidTransitionError"
]
