"""Genomic interval value types.

This module provides the immutable interval records that flow through
the overlap-classification pipeline:

- GenomicInterval: a closed coordinate range on a named sequence
- AnnotationRecord: an annotated exon/CDS/UTR feature of a transcript
- QueryInterval: a region under investigation, keyed by a stable index

Coordinate conventions:
    All coordinates are 1-based and inclusive on both ends, matching
    GTF/GFF annotation files. A single-base interval has start == end.

Example:
    >>> from exontype.utils.intervals import QueryInterval, AnnotationRecord
    >>> query = QueryInterval("chr1", 100, 200, "+", index=0)
    >>> cds = AnnotationRecord(
    ...     "chr1", 50, 100, "+",
    ...     feature_type="CDS",
    ...     transcript_id="ENST0001",
    ...     transcript_type="protein_coding",
    ... )
    >>> query.overlaps(cds)
    True
    >>> cds.ends_at(query.start)
    True
"""

from __future__ import annotations

from collections.abc import Iterable

import attrs

from exontype.errors import InvalidInterval

# =============================================================================
# Constants
# =============================================================================

# Feature types that carry biotype information
FEATURE_EXON = "exon"
FEATURE_CDS = "CDS"
FEATURE_UTR = "UTR"
FEATURE_UTR3 = "UTR3"
FEATURE_UTR5 = "UTR5"

# Sub-features that make a plain exon record redundant
SUBFEATURE_TYPES = frozenset({FEATURE_CDS, FEATURE_UTR, FEATURE_UTR3, FEATURE_UTR5})
RECOGNIZED_FEATURE_TYPES = frozenset({FEATURE_EXON}) | SUBFEATURE_TYPES

UNSTRANDED = "*"


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(frozen=True, slots=True)
class GenomicInterval:
    """A closed genomic interval with sequence name and strand.

    Attributes:
        sequence_name: Chromosome/contig identifier.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
        strand: Strand (+, - or *).

    Raises:
        InvalidInterval: If start > end.
    """

    sequence_name: str
    start: int
    end: int
    strand: str

    def __attrs_post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidInterval(
                f"Interval start must be <= end: "
                f"{self.sequence_name}:{self.start}-{self.end}"
            )

    def __str__(self) -> str:
        return f"{self.sequence_name}:{self.start}-{self.end}"

    @property
    def length(self) -> int:
        """Get interval length in base pairs."""
        return self.end - self.start + 1

    def overlaps(self, other: GenomicInterval) -> bool:
        """Check if this interval shares at least one base with another.

        Strand is ignored.

        Args:
            other: Another interval.

        Returns:
            True if both are on the same sequence and the closed ranges
            intersect.
        """
        if self.sequence_name != other.sequence_name:
            return False
        return self.start <= other.end and other.start <= self.end

    def ends_at(self, position: int) -> bool:
        """Check if this interval ends exactly at a position."""
        return self.end == position

    def starts_at(self, position: int) -> bool:
        """Check if this interval starts exactly at a position."""
        return self.start == position


@attrs.define(frozen=True, slots=True)
class AnnotationRecord(GenomicInterval):
    """An annotated transcript feature (exon, CDS or UTR).

    Attributes:
        feature_type: One of exon, CDS, UTR, UTR3, UTR5.
        transcript_id: Parent transcript identifier.
        transcript_type: Fine-grained transcript biotype, e.g.
            "protein_coding" or "processed_pseudogene".
        exon_number: Exon number within the transcript. Diagnostic only.
        transcript_type_broad: Collapsed biotype, set by
            :func:`exontype.annotate.biotypes.add_broad_types`.
    """

    feature_type: str
    transcript_id: str
    transcript_type: str
    exon_number: int | None = None
    transcript_type_broad: str | None = None

    @property
    def is_recognized(self) -> bool:
        """Whether the feature type carries biotype information."""
        return self.feature_type in RECOGNIZED_FEATURE_TYPES

    @property
    def broad_type(self) -> str:
        """Broad biotype, collapsed on the fly for untagged records."""
        if self.transcript_type_broad is not None:
            return self.transcript_type_broad
        from exontype.annotate.biotypes import collapse_biotype

        return collapse_biotype(self.transcript_type)

    @property
    def typetype(self) -> str:
        """Combined "{broad biotype}-{feature type}" token."""
        return f"{self.broad_type}-{self.feature_type}"


@attrs.define(frozen=True, slots=True)
class QueryInterval(GenomicInterval):
    """A region to classify, such as an exonic part or an intron.

    Attributes:
        index: Stable identifier used as the join key for all results.
    """

    index: int


# =============================================================================
# Helpers
# =============================================================================


def strands_compatible(a: GenomicInterval, b: GenomicInterval) -> bool:
    """Check if two intervals are on compatible strands.

    Unstranded intervals (*) are compatible with either strand.
    """
    if a.strand == UNSTRANDED or b.strand == UNSTRANDED:
        return True
    return a.strand == b.strand


def make_queries(
    intervals: Iterable[GenomicInterval],
    start: int = 0,
) -> list[QueryInterval]:
    """Wrap plain intervals as queries with positional indices.

    Args:
        intervals: Intervals in the order they should be reported.
        start: Index given to the first interval (0 or 1 are typical).

    Returns:
        List of QueryInterval, one per input interval.
    """
    return [
        QueryInterval(
            interval.sequence_name,
            interval.start,
            interval.end,
            interval.strand,
            index=i,
        )
        for i, interval in enumerate(intervals, start=start)
    ]
