"""Pytest configuration and shared fixtures for exontype tests.

Fixtures are organized by category:

- Record factories: build annotation records and queries tersely
- Annotation fixtures: a small synthetic GENCODE-like annotation
- Query fixtures: exonic parts and introns against that annotation

Synthetic annotation (chr1, + strand, 1-based inclusive):

    T1 protein_coding   exon 50-100   = UTR5 50-79  + CDS 80-100
                        exon 201-300  = CDS 201-300
                        exon 401-500  = CDS 401-450 + UTR3 451-500
    T2 retained_intron  exon 50-300
    T3 nonsense_mediated_decay  exon 201-300
    T4 lincRNA          exon 600-700
"""

from typing import Callable

import pytest

from exontype.utils.intervals import AnnotationRecord, QueryInterval


# =============================================================================
# Record Factories
# =============================================================================


def make_record(
    start: int,
    end: int,
    feature_type: str = "exon",
    transcript_id: str = "T1",
    transcript_type: str = "protein_coding",
    sequence_name: str = "chr1",
    strand: str = "+",
    exon_number: int | None = None,
) -> AnnotationRecord:
    """Build an annotation record with sensible defaults."""
    return AnnotationRecord(
        sequence_name,
        start,
        end,
        strand,
        feature_type=feature_type,
        transcript_id=transcript_id,
        transcript_type=transcript_type,
        exon_number=exon_number,
    )


def make_query(
    start: int,
    end: int,
    index: int = 0,
    sequence_name: str = "chr1",
    strand: str = "+",
) -> QueryInterval:
    """Build a query interval."""
    return QueryInterval(sequence_name, start, end, strand, index=index)


@pytest.fixture
def record_factory() -> Callable[..., AnnotationRecord]:
    """Return the annotation record factory."""
    return make_record


@pytest.fixture
def query_factory() -> Callable[..., QueryInterval]:
    """Return the query interval factory."""
    return make_query


# =============================================================================
# Annotation Fixtures
# =============================================================================


@pytest.fixture
def annotations() -> list[AnnotationRecord]:
    """Synthetic annotation described in the module docstring.

    Includes a gene record that the pipeline must ignore.
    """
    return [
        make_record(50, 500, "gene", "T1"),
        # T1 protein coding
        make_record(50, 100, "exon", "T1", exon_number=1),
        make_record(50, 79, "UTR5", "T1", exon_number=1),
        make_record(80, 100, "CDS", "T1", exon_number=1),
        make_record(201, 300, "exon", "T1", exon_number=2),
        make_record(201, 300, "CDS", "T1", exon_number=2),
        make_record(401, 500, "exon", "T1", exon_number=3),
        make_record(401, 450, "CDS", "T1", exon_number=3),
        make_record(451, 500, "UTR3", "T1", exon_number=3),
        # T2 retained intron
        make_record(50, 300, "exon", "T2", "retained_intron", exon_number=1),
        # T3 nonsense mediated decay
        make_record(201, 300, "exon", "T3", "nonsense_mediated_decay", exon_number=2),
        # T4 lincRNA
        make_record(600, 700, "exon", "T4", "lincRNA", exon_number=1),
    ]


# =============================================================================
# Query Fixtures
# =============================================================================


@pytest.fixture
def queries() -> list[QueryInterval]:
    """Queries against the synthetic annotation.

    - 0: intron of T1, touching the last base of exon 1 and the first
      base of exon 2
    - 1: exonic part spanning the T1 start codon
    - 2: exonic part in the T1 3' UTR
    - 3: exonic part in the lincRNA
    - 4: region on another chromosome
    - 5: exonic part inside T1 exon 2
    """
    return [
        make_query(100, 201, index=0),
        make_query(60, 90, index=1),
        make_query(451, 480, index=2),
        make_query(650, 660, index=3),
        make_query(1, 10, index=4, sequence_name="chr2"),
        make_query(260, 280, index=5),
    ]
