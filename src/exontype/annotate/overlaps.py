"""Overlap detection between query intervals and annotation records.

This module provides:

- OverlapIndex: a sorted per-sequence index of annotation records
- find_overlaps: all (query, record) pairs sharing at least one base
- filter_redundant_exons: drop exon records subsumed by a CDS/UTR record

The index stores record starts and ends in numpy arrays sorted by start.
A query [qs, qe] only needs to scan records whose start lies in
[qs - longest_record + 1, qe], located with binary search.

Example:
    >>> from exontype.annotate.overlaps import find_overlaps, filter_redundant_exons
    >>> hits = find_overlaps(queries, annotations)
    >>> hits = filter_redundant_exons(hits)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import attrs
import numpy as np

from exontype.utils.intervals import (
    FEATURE_EXON,
    SUBFEATURE_TYPES,
    AnnotationRecord,
    GenomicInterval,
    QueryInterval,
    strands_compatible,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(frozen=True, slots=True)
class OverlapHit:
    """A query index paired with one overlapping annotation record.

    Attributes:
        query_index: Index of the overlapping query.
        record: The overlapping annotation record.
    """

    query_index: int
    record: AnnotationRecord


@attrs.define(slots=True)
class _SequenceIndex:
    """Sorted coordinates of the records on a single sequence."""

    starts: np.ndarray
    ends: np.ndarray
    positions: np.ndarray  # Positions into OverlapIndex.records
    max_length: int


# =============================================================================
# Overlap Index
# =============================================================================


class OverlapIndex:
    """Sorted-interval index over annotation records.

    Records are grouped by sequence name and sorted by start coordinate.
    Queries return records in their original input order.

    Attributes:
        records: Indexed annotation records, in input order.

    Example:
        >>> index = OverlapIndex(annotations)
        >>> index.overlapping(GenomicInterval("chr1", 100, 200, "+"))
        [AnnotationRecord(...), ...]
    """

    def __init__(self, records: Iterable[AnnotationRecord]) -> None:
        """Build the index.

        Args:
            records: Annotation records to index.
        """
        self.records: list[AnnotationRecord] = list(records)
        self._by_sequence: dict[str, _SequenceIndex] = {}

        grouped: dict[str, list[int]] = {}
        for i, record in enumerate(self.records):
            grouped.setdefault(record.sequence_name, []).append(i)

        for sequence_name, positions in grouped.items():
            starts = np.array([self.records[i].start for i in positions], dtype=np.int64)
            ends = np.array([self.records[i].end for i in positions], dtype=np.int64)
            order = np.argsort(starts, kind="stable")
            self._by_sequence[sequence_name] = _SequenceIndex(
                starts=starts[order],
                ends=ends[order],
                positions=np.asarray(positions, dtype=np.int64)[order],
                max_length=int((ends - starts).max()) + 1,
            )

        logger.debug(
            f"Indexed {len(self.records)} records on "
            f"{len(self._by_sequence)} sequences"
        )

    def __len__(self) -> int:
        return len(self.records)

    @property
    def sequence_names(self) -> list[str]:
        """Sequence names with at least one indexed record."""
        return sorted(self._by_sequence)

    def overlapping_positions(self, interval: GenomicInterval) -> list[int]:
        """Find positions of records overlapping an interval.

        Args:
            interval: Interval to look up (strand is ignored).

        Returns:
            Sorted positions into ``records``.
        """
        seq_index = self._by_sequence.get(interval.sequence_name)
        if seq_index is None:
            return []

        # Records starting before this bound are too short to reach the query
        lower = interval.start - seq_index.max_length + 1
        lo = int(np.searchsorted(seq_index.starts, lower, side="left"))
        hi = int(np.searchsorted(seq_index.starts, interval.end, side="right"))
        if lo >= hi:
            return []

        mask = seq_index.ends[lo:hi] >= interval.start
        return sorted(int(p) for p in seq_index.positions[lo:hi][mask])

    def overlapping(self, interval: GenomicInterval) -> list[AnnotationRecord]:
        """Find records overlapping an interval.

        Args:
            interval: Interval to look up (strand is ignored).

        Returns:
            Overlapping records in input order.
        """
        return [self.records[p] for p in self.overlapping_positions(interval)]


# =============================================================================
# Overlap Operations
# =============================================================================


def find_overlaps(
    queries: Sequence[QueryInterval],
    annotations: Iterable[AnnotationRecord],
    strand_aware: bool = False,
) -> list[OverlapHit]:
    """Find every (query, record) pair that shares at least one base.

    Overlaps are reported regardless of strand unless ``strand_aware``
    is set. Records whose feature type is not exon/CDS/UTR/UTR3/UTR5
    are dropped.

    Args:
        queries: Query intervals.
        annotations: Annotation records.
        strand_aware: Only report pairs on compatible strands.

    Returns:
        Hits ordered by query, then by record input order.
    """
    annotations = list(annotations)
    recognized = [r for r in annotations if r.is_recognized]
    n_dropped = len(annotations) - len(recognized)
    if n_dropped:
        logger.debug(f"Ignoring {n_dropped} records with unrecognized feature types")

    index = OverlapIndex(recognized)

    hits = []
    for query in queries:
        for record in index.overlapping(query):
            if strand_aware and not strands_compatible(query, record):
                continue
            hits.append(OverlapHit(query.index, record))

    logger.debug(f"Found {len(hits)} overlaps for {len(queries)} queries")
    return hits


def filter_redundant_exons(hits: Sequence[OverlapHit]) -> list[OverlapHit]:
    """Remove exon records already described by a CDS or UTR record.

    An exon record is dropped when any CDS/UTR/UTR3/UTR5 record of the
    same transcript in ``hits`` shares its start or its end coordinate.
    The check spans all hits, not just those of the same query.

    Args:
        hits: Overlap hits.

    Returns:
        Hits with redundant exon records removed, order preserved.
    """
    sub_starts: set[tuple[int, str]] = set()
    sub_ends: set[tuple[int, str]] = set()
    for hit in hits:
        record = hit.record
        if record.feature_type in SUBFEATURE_TYPES:
            sub_starts.add((record.start, record.transcript_id))
            sub_ends.add((record.end, record.transcript_id))

    kept = []
    for hit in hits:
        record = hit.record
        if record.feature_type == FEATURE_EXON and (
            (record.start, record.transcript_id) in sub_starts
            or (record.end, record.transcript_id) in sub_ends
        ):
            continue
        kept.append(hit)

    logger.debug(f"Removed {len(hits) - len(kept)} redundant exon records")
    return kept
