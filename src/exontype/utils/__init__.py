"""Utility functions for exontype.

This module provides common utilities used across exontype:

- Interval value types (genomic intervals, annotation records, queries)
- Logging configuration

Example:
    >>> from exontype.utils import QueryInterval, make_queries
    >>> from exontype.utils.logging import setup_logging
"""

from exontype.utils.intervals import (
    RECOGNIZED_FEATURE_TYPES,
    SUBFEATURE_TYPES,
    AnnotationRecord,
    GenomicInterval,
    QueryInterval,
    make_queries,
    strands_compatible,
)

__all__ = [
    "GenomicInterval",
    "AnnotationRecord",
    "QueryInterval",
    "make_queries",
    "strands_compatible",
    "RECOGNIZED_FEATURE_TYPES",
    "SUBFEATURE_TYPES",
]
