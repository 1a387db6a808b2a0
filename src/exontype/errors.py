"""Exceptions raised by exontype.

All errors derive from :class:`ExonTypeError`. The validation errors also
derive from :class:`ValueError` so that callers catching ``ValueError``
continue to work.

Example:
    >>> from exontype.errors import InvalidInterval
    >>> from exontype.utils.intervals import GenomicInterval
    >>> GenomicInterval("chr1", 200, 100, "+")
    Traceback (most recent call last):
    ...
    exontype.errors.InvalidInterval: Interval start must be <= end: chr1:200-100
"""


class ExonTypeError(Exception):
    """Base class for all exontype errors."""


class InvalidInterval(ExonTypeError, ValueError):
    """Raised when an interval is constructed with start > end."""


class InvalidConfiguration(ExonTypeError, ValueError):
    """Raised when a classification is requested with invalid settings."""


class DuplicateQueryIndex(InvalidConfiguration):
    """Raised when two query intervals share the same index."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Query index {index} is used by more than one interval")
