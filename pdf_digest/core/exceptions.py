"""
Error kinds raised by the PDF section digest components.
"""

from typing import Optional


class PdfDigestError(Exception):
    """Base class for all pipeline errors."""


class ExtractionError(PdfDigestError):
    """The input PDF could not be read or parsed."""


class ConnectionCheckError(PdfDigestError):
    """The Ollama endpoint did not answer the preflight probe."""


class SummarizationError(PdfDigestError):
    """A single summarization request failed."""


class RetryExhaustedError(SummarizationError):
    """Every attempt of a retried operation failed."""
    
    def __init__(self, operation_name: str, attempts: int, last_error: Optional[BaseException]):
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error
        reason = str(last_error) if last_error is not None else "no attempts were made"
        super().__init__(f"Failed to {operation_name} after {attempts} attempts: {reason}")


class ExportError(PdfDigestError):
    """The summary PDF could not be written."""


class ProcessingCancelled(PdfDigestError):
    """A run was cancelled between two subsections."""
