"""Custom exception classes for FinWise."""


class FinWiseError(Exception):
    """Base exception for FinWise."""
    pass


class ConfigError(FinWiseError):
    """Configuration-related errors."""
    pass


class LLMError(FinWiseError):
    """LLM processing errors."""
    pass


class LLMTransportError(LLMError):
    """The LLM endpoint could not be reached or returned no completion."""
    pass


class InvalidJSONError(LLMError):
    """The LLM replied, but the reply is not parseable JSON."""

    def __init__(self, message: str = "Invalid JSON response from LLM", raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class MalformedResponseError(LLMError):
    """The LLM reply is valid JSON but does not match the expected shape."""
    pass


class StorageError(FinWiseError):
    """State persistence errors."""
    pass


class FileValidationError(FinWiseError):
    """Uploaded file rejected before processing."""
    pass


class PDFError(FinWiseError):
    """PDF extraction errors."""
    pass


class InvalidTransitionError(FinWiseError):
    """Processing stage moved backwards or out of a terminal stage."""
    pass
