"""Adjacency resolution for overlap hits.

Splits overlap hits into the subsets used for labelling:

- from: records ending exactly at the query start (upstream feature)
- to: records starting exactly at the query end (downstream feature)
- overlap: all hits, unrestricted

When both from and to are requested, only (transcript, query) pairs
present in both subsets are kept. For an intron query this retains the
exons directly before and after it in the same transcript.

Example:
    >>> from exontype.annotate.adjacency import resolve_adjacency
    >>> subsets = resolve_adjacency(hits, queries, sets=("from", "to"))
    >>> subsets.from_
    [OverlapHit(query_index=0, record=AnnotationRecord(...))]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

import attrs

from exontype.annotate.overlaps import OverlapHit
from exontype.config import SET_FROM, SET_OVERLAP, SET_TO, normalize_sets
from exontype.utils.intervals import QueryInterval

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(slots=True)
class AdjacencySets:
    """Hit subsets for each requested set.

    A subset is None when its set was not requested.

    Attributes:
        from_: Hits ending at the query start.
        to: Hits starting at the query end.
        overlap: All hits.
    """

    from_: list[OverlapHit] | None = None
    to: list[OverlapHit] | None = None
    overlap: list[OverlapHit] | None = None

    def get(self, name: str) -> list[OverlapHit] | None:
        """Get a subset by set name ("from", "to" or "overlap")."""
        if name == SET_FROM:
            return self.from_
        return getattr(self, name)

    def items(self) -> list[tuple[str, list[OverlapHit]]]:
        """Requested (set name, hits) pairs in from/to/overlap order."""
        pairs = [(SET_FROM, self.from_), (SET_TO, self.to), (SET_OVERLAP, self.overlap)]
        return [(name, hits) for name, hits in pairs if hits is not None]


# =============================================================================
# Resolution
# =============================================================================


def _pair_keys(hits: Iterable[OverlapHit]) -> set[tuple[str, int]]:
    return {(hit.record.transcript_id, hit.query_index) for hit in hits}


def resolve_adjacency(
    hits: Sequence[OverlapHit],
    queries: Mapping[int, QueryInterval] | Sequence[QueryInterval],
    sets: str | Iterable[str] = (SET_FROM, SET_TO, SET_OVERLAP),
) -> AdjacencySets:
    """Partition hits into from/to/overlap subsets.

    Args:
        hits: Filtered overlap hits.
        queries: Queries by index, or a sequence of queries.
        sets: Set name or names to compute.

    Returns:
        AdjacencySets with the requested subsets populated.

    Raises:
        InvalidConfiguration: If ``sets`` is empty or has unknown names.
    """
    requested = normalize_sets(sets)
    if not isinstance(queries, Mapping):
        queries = {query.index: query for query in queries}

    result = AdjacencySets()

    if SET_FROM in requested:
        result.from_ = [
            hit for hit in hits
            if hit.record.ends_at(queries[hit.query_index].start)
        ]
    if SET_TO in requested:
        result.to = [
            hit for hit in hits
            if hit.record.starts_at(queries[hit.query_index].end)
        ]

    # Keep only exon-intron-exon pairs
    if result.from_ is not None and result.to is not None:
        both = _pair_keys(result.from_) & _pair_keys(result.to)
        result.from_ = [
            hit for hit in result.from_
            if (hit.record.transcript_id, hit.query_index) in both
        ]
        result.to = [
            hit for hit in result.to
            if (hit.record.transcript_id, hit.query_index) in both
        ]
        logger.debug(f"{len(both)} transcript/query pairs flank on both sides")

    if SET_OVERLAP in requested:
        result.overlap = list(hits)

    return result
