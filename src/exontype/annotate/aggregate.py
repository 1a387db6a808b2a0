"""Overlap type aggregation and end-to-end classification.

This module turns overlap hits into one label per query and set. A
label is the sorted, de-duplicated, colon-joined list of
"{broad biotype}-{feature type}" tokens, e.g.
"lncRNA-exon:protein_coding-CDS".

Hits from retained-intron exons and from NMD transcripts are excluded
before labelling: they mostly duplicate protein-coding exons.

Example:
    >>> from exontype.annotate.aggregate import overlap_types
    >>> table = overlap_types(queries, annotations, sets=("from", "to"))
    >>> table.labels[0].from_
    'protein_coding-CDS'
    >>> df = table.to_dataframe()
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator, Sequence
from enum import Enum
from typing import Any

import attrs

from exontype.annotate.adjacency import AdjacencySets, resolve_adjacency
from exontype.annotate.biotypes import BROAD_NMD, add_broad_types
from exontype.annotate.overlaps import OverlapHit, filter_redundant_exons, find_overlaps
from exontype.annotate.summarize import summarise_exon_type
from exontype.config import (
    SET_FROM,
    SET_OVERLAP,
    SET_TO,
    ClassifierConfig,
    ParallelConfig,
)
from exontype.errors import DuplicateQueryIndex
from exontype.parallel.executor import ParallelExecutor
from exontype.utils.intervals import AnnotationRecord, QueryInterval
from exontype.utils.logging import Timer

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

LABEL_SEPARATOR = ":"

RETAINED_INTRON_EXON = "retained_intron-exon"
EXCLUDED_BROAD_TYPES = frozenset({BROAD_NMD})

SUMMARY_COLUMN = "summary"
TYPES_SUFFIX = "_types"
TRANSCRIPT_TYPES_SUFFIX = "_transcript_types"


class AggregateKey(Enum):
    """Record attribute that labels are built from."""

    TYPETYPE = "typetype"  # "{broad biotype}-{feature type}"
    FEATURE_TYPE = "feature_type"
    BROAD_TYPE = "broad_type"


# =============================================================================
# Type Aggregator
# =============================================================================


def is_excluded(record: AnnotationRecord) -> bool:
    """Whether a record is left out of typetype labels."""
    return (
        record.typetype == RETAINED_INTRON_EXON
        or record.broad_type in EXCLUDED_BROAD_TYPES
    )


def join_label(tokens: Iterable[str]) -> str:
    """Sort, de-duplicate and colon-join label tokens."""
    return LABEL_SEPARATOR.join(sorted(set(tokens)))


@attrs.define(frozen=True)
class TypeAggregator:
    """Collapses overlap hits into one label per query index.

    Attributes:
        key: Record attribute used as the label token.
        apply_exclusions: Drop retained-intron exons and NMD records
            first. Only typetype labels use exclusions by default.
    """

    key: AggregateKey = AggregateKey.TYPETYPE
    apply_exclusions: bool = attrs.field()

    @apply_exclusions.default
    def _default_exclusions(self) -> bool:
        return self.key == AggregateKey.TYPETYPE

    def token(self, record: AnnotationRecord) -> str | None:
        """Get the label token contributed by a record."""
        if self.key == AggregateKey.TYPETYPE:
            return record.typetype
        return getattr(record, self.key.value)

    def aggregate(self, hits: Iterable[OverlapHit]) -> dict[int, str]:
        """Aggregate hits into labels.

        Args:
            hits: Hits for any number of queries.

        Returns:
            Mapping from query index to label. Queries without any
            qualifying hit are absent.
        """
        tokens: dict[int, set[str]] = defaultdict(set)
        for hit in hits:
            if self.apply_exclusions and is_excluded(hit.record):
                continue
            token = self.token(hit.record)
            if token is not None:
                tokens[hit.query_index].add(token)

        return {index: join_label(values) for index, values in tokens.items()}


TYPETYPE_AGGREGATOR = TypeAggregator(AggregateKey.TYPETYPE)
FEATURE_TYPE_AGGREGATOR = TypeAggregator(AggregateKey.FEATURE_TYPE)
BROAD_TYPE_AGGREGATOR = TypeAggregator(AggregateKey.BROAD_TYPE)


# =============================================================================
# Output Tables
# =============================================================================


@attrs.define(slots=True)
class TypeLabel:
    """Labels for a single query.

    Attributes:
        index: Query index.
        from_: Label of features ending at the query start.
        to: Label of features starting at the query end.
        overlap: Label of all overlapping features.
        summary: Summarised overlap label (CDS, UTR5, ...). None when
            the overlap label is missing, rather than noncoding_exon,
            so a query without overlaps has every label absent.
        components: Extra per-set feature/transcript type labels.
    """

    index: int
    from_: str | None = None
    to: str | None = None
    overlap: str | None = None
    summary: str | None = None
    components: dict[str, str | None] = attrs.Factory(dict)

    def get(self, column: str) -> str | None:
        """Get a label by column name."""
        if column == SET_FROM:
            return self.from_
        if column in (SET_TO, SET_OVERLAP, SUMMARY_COLUMN):
            return getattr(self, column)
        return self.components.get(column)

    def set(self, column: str, value: str | None) -> None:
        """Set a label by column name."""
        if column == SET_FROM:
            self.from_ = value
        elif column in (SET_TO, SET_OVERLAP, SUMMARY_COLUMN):
            setattr(self, column, value)
        else:
            self.components[column] = value


@attrs.define(slots=True)
class TypeTable:
    """Labels for every query, in query input order.

    Attributes:
        sets: Sets that were computed.
        labels: One TypeLabel per query.
        columns: Label columns present in the table.
    """

    sets: tuple[str, ...]
    labels: list[TypeLabel]
    columns: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self) -> Iterator[TypeLabel]:
        return iter(self.labels)

    def get(self, index: int) -> TypeLabel | None:
        """Get the labels of a query by its index."""
        for label in self.labels:
            if label.index == index:
                return label
        return None

    def to_records(self) -> list[dict[str, Any]]:
        """Convert to a list of row dictionaries."""
        return [
            {"index": label.index, **{col: label.get(col) for col in self.columns}}
            for label in self.labels
        ]

    def to_dataframe(self) -> Any:  # Returns pd.DataFrame
        """Convert to pandas DataFrame.

        Returns:
            DataFrame with an integer "index" column and one nullable
            string column per label column.
        """
        import pandas as pd

        df = pd.DataFrame(self.to_records(), columns=["index", *self.columns])
        df["index"] = df["index"].astype("int64")
        return df.astype({col: "string" for col in self.columns})


# =============================================================================
# Classification
# =============================================================================


@attrs.define
class _AggregationBatch:
    """Hit subsets for a slice of query indices."""

    subsets: dict[str, list[OverlapHit]]
    include_components: bool


def _aggregate_batch(batch: _AggregationBatch) -> dict[str, dict[int, str]]:
    """Aggregate every requested set of one batch."""
    columns: dict[str, dict[int, str]] = {}
    for name, hits in batch.subsets.items():
        columns[name] = TYPETYPE_AGGREGATOR.aggregate(hits)
        if batch.include_components:
            columns[name + TYPES_SUFFIX] = FEATURE_TYPE_AGGREGATOR.aggregate(hits)
            columns[name + TRANSCRIPT_TYPES_SUFFIX] = BROAD_TYPE_AGGREGATOR.aggregate(hits)
    return columns


def _label_columns(config: ClassifierConfig) -> tuple[str, ...]:
    columns = list(config.sets)
    if config.include_components:
        for name in config.sets:
            columns += [name + TYPES_SUFFIX, name + TRANSCRIPT_TYPES_SUFFIX]
    if config.summarize:
        columns.append(SUMMARY_COLUMN)
    return tuple(columns)


class OverlapTypeClassifier:
    """Classifies query intervals by the biotype of overlapping features.

    Runs the full pipeline: overlap detection, redundant-exon filtering,
    biotype collapsing, adjacency resolution, then per-query aggregation.
    The aggregation stage is split into batches of query indices and
    run through a ParallelExecutor.

    Example:
        >>> classifier = OverlapTypeClassifier(ClassifierConfig(sets=("overlap",)))
        >>> table = classifier.classify(queries, annotations)
    """

    def __init__(
        self,
        config: ClassifierConfig | None = None,
        parallel: ParallelConfig | None = None,
    ) -> None:
        """Initialize classifier.

        Args:
            config: Classification settings.
            parallel: Aggregation parallelism settings.

        Raises:
            InvalidConfiguration: If either configuration is invalid.
        """
        self.config = config or ClassifierConfig()
        self.parallel = parallel or ParallelConfig()
        self.config.validate()
        self.parallel.validate()

    def resolve(
        self,
        queries: Sequence[QueryInterval],
        annotations: Iterable[AnnotationRecord],
    ) -> AdjacencySets:
        """Compute the tagged hit subsets for each requested set.

        Args:
            queries: Query intervals with unique indices.
            annotations: Annotation records.

        Returns:
            AdjacencySets for the configured sets.

        Raises:
            DuplicateQueryIndex: If two queries share an index.
        """
        by_index: dict[int, QueryInterval] = {}
        for query in queries:
            if query.index in by_index:
                raise DuplicateQueryIndex(query.index)
            by_index[query.index] = query

        hits = find_overlaps(queries, annotations, strand_aware=self.config.strand_aware)
        hits = filter_redundant_exons(hits)
        hits = add_broad_types(hits)
        return resolve_adjacency(hits, by_index, self.config.sets)

    def classify(
        self,
        queries: Sequence[QueryInterval],
        annotations: Iterable[AnnotationRecord],
    ) -> TypeTable:
        """Label every query.

        Args:
            queries: Query intervals with unique indices.
            annotations: Annotation records.

        Returns:
            TypeTable with one row per query, in input order.
        """
        with Timer("Overlap type classification", logger):
            subsets = self.resolve(queries, annotations)
            batches = self._make_batches(queries, subsets)

            executor = ParallelExecutor(
                n_workers=self.parallel.n_workers,
                backend=self.parallel.backend,
            )
            results, _ = executor.map_items(
                _aggregate_batch,
                batches,
                desc="Aggregating overlap types",
                continue_on_error=False,
            )

            labels = {query.index: TypeLabel(index=query.index) for query in queries}
            for task_result in results:
                for column, values in task_result.result.items():
                    for index, value in values.items():
                        labels[index].set(column, value)

            if self.config.summarize:
                for label in labels.values():
                    if label.overlap is not None:
                        label.summary = summarise_exon_type(label.overlap)

        ordered = [labels[query.index] for query in queries]
        columns = _label_columns(self.config)
        for label in ordered:
            for column in columns:
                if column not in (SET_FROM, SET_TO, SET_OVERLAP, SUMMARY_COLUMN):
                    label.components.setdefault(column, None)

        n_labelled = sum(
            1 for label in ordered if any(label.get(name) for name in self.config.sets)
        )
        logger.info(
            f"Labelled {n_labelled}/{len(ordered)} queries "
            f"(sets: {', '.join(self.config.sets)})"
        )
        return TypeTable(sets=self.config.sets, labels=ordered, columns=columns)

    def _make_batches(
        self,
        queries: Sequence[QueryInterval],
        subsets: AdjacencySets,
    ) -> list[_AggregationBatch]:
        """Split hit subsets into batches of query indices."""
        size = self.parallel.batch_size
        batch_of = {
            query.index: position // size for position, query in enumerate(queries)
        }
        n_batches = (len(queries) + size - 1) // size

        batches = [
            _AggregationBatch(
                subsets={name: [] for name, _ in subsets.items()},
                include_components=self.config.include_components,
            )
            for _ in range(n_batches)
        ]
        for name, hits in subsets.items():
            for hit in hits:
                batches[batch_of[hit.query_index]].subsets[name].append(hit)

        return batches


def overlap_types(
    queries: Sequence[QueryInterval],
    annotations: Iterable[AnnotationRecord],
    sets: str | Iterable[str] = (SET_FROM, SET_TO, SET_OVERLAP),
    summarize: bool = False,
    n_workers: int = 1,
) -> TypeTable:
    """Label query intervals by the types of overlapping features.

    Convenience wrapper around :class:`OverlapTypeClassifier`.

    Args:
        queries: Query intervals with unique indices.
        annotations: Annotation records (exon, CDS, UTR, UTR3, UTR5).
        sets: Set name or names to compute: from, to, overlap.
        summarize: Add the summarised overlap label.
        n_workers: Number of aggregation workers.

    Returns:
        TypeTable with one row per query.

    Raises:
        InvalidConfiguration: If ``sets`` is empty or has unknown names.
    """
    config = ClassifierConfig(sets=sets, summarize=summarize)
    parallel = ParallelConfig(n_workers=n_workers)
    return OverlapTypeClassifier(config, parallel).classify(queries, annotations)
