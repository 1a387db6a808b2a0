"""Overlap-based exon type annotation.

This module classifies query intervals (exonic parts, introns, probe
regions) by the biotype of the annotation features they overlap:

- Biotype collapsing into broad categories
- Overlap detection and redundant-exon filtering
- Adjacency resolution (from/to flanking features)
- Per-query label aggregation and summarisation

Example:
    >>> from exontype.annotate import overlap_types, summarise_exon_types
    >>> table = overlap_types(queries, annotations, sets="overlap")
    >>> summaries = summarise_exon_types(label.overlap for label in table)
"""

from exontype.annotate.adjacency import AdjacencySets, resolve_adjacency
from exontype.annotate.aggregate import (
    AggregateKey,
    OverlapTypeClassifier,
    TypeAggregator,
    TypeLabel,
    TypeTable,
    overlap_types,
)
from exontype.annotate.biotypes import (
    BROAD_TYPE_TABLE,
    add_broad_types,
    collapse_biotype,
)
from exontype.annotate.overlaps import (
    OverlapHit,
    OverlapIndex,
    filter_redundant_exons,
    find_overlaps,
)
from exontype.annotate.summarize import (
    SUMMARY_TYPES,
    summarise_exon_type,
    summarise_exon_types,
)

__all__ = [
    # Biotypes
    "BROAD_TYPE_TABLE",
    "collapse_biotype",
    "add_broad_types",
    # Overlaps
    "OverlapHit",
    "OverlapIndex",
    "find_overlaps",
    "filter_redundant_exons",
    # Adjacency
    "AdjacencySets",
    "resolve_adjacency",
    # Aggregation
    "AggregateKey",
    "TypeAggregator",
    "TypeLabel",
    "TypeTable",
    "OverlapTypeClassifier",
    "overlap_types",
    # Summaries
    "SUMMARY_TYPES",
    "summarise_exon_type",
    "summarise_exon_types",
]
