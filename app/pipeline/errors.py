"""
app/pipeline/errors.py

Exceptions raised by the sales summary pipeline stages.
"""

from __future__ import annotations


class SummaryPipelineError(Exception):
    """Base exception for pipeline stage failures."""


class EmptyInputError(SummaryPipelineError):
    """Raised when submitted CSV text is empty or whitespace-only."""


class NoHeadersError(SummaryPipelineError):
    """Raised when the header line has no non-empty cell."""


class ParseError(SummaryPipelineError):
    """Raised when the underlying line source fails while being read."""


class SerializationError(SummaryPipelineError):
    """Raised when a summary cannot be written as delimited text."""
