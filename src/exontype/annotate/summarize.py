"""Summarise composite exon type labels into broad categories.

Composite overlap labels such as
"lncRNA-exon:protein_coding-CDS:protein_coding-UTR5" are reduced to one
of: CDS, UTR5, UTR3, start_codon, stop_codon or noncoding_exon.

Example:
    >>> from exontype.annotate.summarize import summarise_exon_type
    >>> summarise_exon_type("protein_coding-CDS:protein_coding-UTR5")
    'start_codon'
    >>> summarise_exon_type("lncRNA-exon")
    'noncoding_exon'
"""

from __future__ import annotations

from collections.abc import Iterable

# =============================================================================
# Constants
# =============================================================================

START_CODON = "start_codon"
STOP_CODON = "stop_codon"
UTR5 = "UTR5"
UTR3 = "UTR3"
CDS = "CDS"
NONCODING_EXON = "noncoding_exon"

SUMMARY_TYPES = (START_CODON, STOP_CODON, UTR5, UTR3, CDS, NONCODING_EXON)

# Applied in order; each rewrites every occurrence of the compound
COMPOUND_REWRITES = (
    (
        "protein_coding-CDS:protein_coding-UTR3:protein_coding-UTR5",
        "protein_coding-CDS",
    ),
    ("protein_coding-CDS:protein_coding-UTR5", "protein_coding-start_codon"),
    ("protein_coding-CDS:protein_coding-UTR3", "protein_coding-stop_codon"),
)

# First matching token wins
SUMMARY_RULES = (
    ("protein_coding-start_codon", START_CODON),
    ("protein_coding-stop_codon", STOP_CODON),
    ("protein_coding-UTR5", UTR5),
    ("protein_coding-UTR3", UTR3),
    ("protein_coding-CDS", CDS),
)


# =============================================================================
# Summarisation
# =============================================================================


def rewrite_compounds(label: str) -> str:
    """Rewrite CDS/UTR compounds into start/stop codon tokens."""
    for compound, replacement in COMPOUND_REWRITES:
        label = label.replace(compound, replacement)
    return label


def summarise_exon_type(label: str) -> str:
    """Summarise a composite overlap label.

    Args:
        label: Colon-joined "{biotype}-{feature}" label.

    Returns:
        One of ``SUMMARY_TYPES``.
    """
    label = rewrite_compounds(label)
    for token, summary in SUMMARY_RULES:
        if token in label:
            return summary
    return NONCODING_EXON


def summarise_exon_types(labels: Iterable[str | None]) -> list[str | None]:
    """Summarise a sequence of labels, keeping missing labels as None."""
    return [None if label is None else summarise_exon_type(label) for label in labels]
