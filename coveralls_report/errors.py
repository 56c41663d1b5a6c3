"""Exceptions raised by the export pipeline."""


class ExportError(Exception):
    """Base exception for all export failures."""


class MissingCredentialError(ExportError):
    """Raised when no Coveralls key is configured. Nothing is sent."""


class SubmissionError(ExportError):
    """Raised when the report could not be delivered to the endpoint."""
