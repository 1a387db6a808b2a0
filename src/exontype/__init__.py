"""exontype: classify genomic regions by the biotype of overlapping annotation.

exontype labels exonic parts, introns and other query regions with the
kind of annotated sequence they overlap (coding sequence, UTRs, start
and stop codons, non-coding transcripts), to help interpret
differential exon usage and alternative splicing results.

Example:
    >>> import exontype
    >>> table = exontype.overlap_types(queries, annotations, sets=("from", "to"))
    >>> table.to_dataframe()

Modules:
    annotate: Overlap detection, biotype collapsing, label aggregation
    parallel: Parallel execution of the aggregation stage
    utils: Interval value types and logging
"""

__version__ = "0.1.0"

from exontype.annotate import (
    OverlapTypeClassifier,
    TypeTable,
    collapse_biotype,
    overlap_types,
    summarise_exon_type,
    summarise_exon_types,
)
from exontype.config import ClassifierConfig, Config, ParallelConfig
from exontype.errors import (
    DuplicateQueryIndex,
    ExonTypeError,
    InvalidConfiguration,
    InvalidInterval,
)
from exontype.utils.intervals import (
    AnnotationRecord,
    GenomicInterval,
    QueryInterval,
    make_queries,
)

__all__ = [
    "__version__",
    "AnnotationRecord",
    "GenomicInterval",
    "QueryInterval",
    "make_queries",
    "Config",
    "ClassifierConfig",
    "ParallelConfig",
    "OverlapTypeClassifier",
    "TypeTable",
    "overlap_types",
    "collapse_biotype",
    "summarise_exon_type",
    "summarise_exon_types",
    "ExonTypeError",
    "InvalidInterval",
    "InvalidConfiguration",
    "DuplicateQueryIndex",
]
