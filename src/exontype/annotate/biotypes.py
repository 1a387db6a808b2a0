"""Transcript biotype collapsing.

GENCODE/Ensembl annotate transcripts with several dozen fine-grained
biotypes. For exon classification these are collapsed into a handful of
broad categories:

- lncRNA: long non-coding transcripts
- short_ncRNA: small RNAs, immunoglobulin and T-cell receptor segments
- pseudogene: all pseudogene flavours
- nmd: nonsense-mediated and non-stop decay transcripts

Biotypes outside these tables (protein_coding, retained_intron, ...)
pass through unchanged.

Example:
    >>> from exontype.annotate.biotypes import collapse_biotype
    >>> collapse_biotype("lincRNA")
    'lncRNA'
    >>> collapse_biotype("protein_coding")
    'protein_coding'
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable
from types import MappingProxyType

import attrs

from exontype.annotate.overlaps import OverlapHit

logger = logging.getLogger(__name__)

# =============================================================================
# Broad Categories
# =============================================================================

BROAD_LNCRNA = "lncRNA"
BROAD_SHORT_NCRNA = "short_ncRNA"
BROAD_PSEUDOGENE = "pseudogene"
BROAD_NMD = "nmd"

LNCRNA_TYPES = frozenset({
    "3prime_overlapping_ncrna",
    "3prime_overlapping_ncRNA",
    "antisense",
    "bidirectional_promoter_lncRNA",
    "macro_lncRNA",
    "known_ncrna",
    "lincRNA",
    "non_coding",
    "processed_transcript",
    "sense_intronic",
    "sense_overlapping",
})

SHORT_NCRNA_TYPES = frozenset({
    "IG_C_gene",
    "IG_C_pseudogene",
    "IG_D_gene",
    "IG_J_gene",
    "IG_J_pseudogene",
    "IG_V_gene",
    "IG_D_pseudogene",
    "IG_LV_gene",
    "IG_pseudogene",
    "ribozyme",
    "IG_V_pseudogene",
    "miRNA",
    "misc_RNA",
    "Mt_rRNA",
    "Mt_tRNA",
    "rRNA",
    "snoRNA",
    "snRNA",
    "TEC",
    "scaRNA",
    "scRNA",
    "sRNA",
    "TR_C_gene",
    "TR_D_gene",
    "TR_J_gene",
    "TR_J_pseudogene",
    "TR_V_gene",
    "TR_V_pseudogene",
})

# " pseudogene" (leading space) is kept as-is; plain "pseudogene" passes
# through unchanged and already equals the broad category.
PSEUDOGENE_TYPES = frozenset({
    "processed_pseudogene",
    " pseudogene",
    "transcribed_processed_pseudogene",
    "transcribed_unitary_pseudogene",
    "transcribed_unprocessed_pseudogene",
    "translated_processed_pseudogene",
    "translated_unprocessed_pseudogene",
    "polymorphic_pseudogene",
    "unitary_pseudogene",
    "unprocessed_pseudogene",
})

NMD_TYPES = frozenset({
    "nonsense_mediated_decay",
    "non_stop_decay",
})

BROAD_TYPE_TABLE = MappingProxyType({
    **{fine: BROAD_LNCRNA for fine in LNCRNA_TYPES},
    **{fine: BROAD_SHORT_NCRNA for fine in SHORT_NCRNA_TYPES},
    **{fine: BROAD_PSEUDOGENE for fine in PSEUDOGENE_TYPES},
    **{fine: BROAD_NMD for fine in NMD_TYPES},
})


# =============================================================================
# Collapsing
# =============================================================================


@functools.lru_cache(maxsize=None)
def collapse_biotype(fine_type: str) -> str:
    """Collapse a fine-grained transcript biotype to its broad category.

    Args:
        fine_type: Transcript biotype as written in the annotation.

    Returns:
        Broad category, or the input unchanged when it is not in any
        collapsing table.
    """
    return BROAD_TYPE_TABLE.get(fine_type, fine_type)


def add_broad_types(hits: Iterable[OverlapHit]) -> list[OverlapHit]:
    """Tag each hit's annotation record with its broad biotype.

    Records are immutable, so tagged copies are returned.

    Args:
        hits: Overlap hits to tag.

    Returns:
        New hits whose records have ``transcript_type_broad`` set.
    """
    tagged = []
    for hit in hits:
        record = hit.record
        broad = collapse_biotype(record.transcript_type)
        if record.transcript_type_broad != broad:
            record = attrs.evolve(record, transcript_type_broad=broad)
            hit = attrs.evolve(hit, record=record)
        tagged.append(hit)

    logger.debug(
        f"Tagged {len(tagged)} hits "
        f"({collapse_biotype.cache_info().currsize} distinct biotypes cached)"
    )
    return tagged
