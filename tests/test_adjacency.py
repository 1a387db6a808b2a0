"""Tests for adjacency resolution (from/to/overlap subsets)."""

import pytest

from exontype.annotate.adjacency import AdjacencySets, resolve_adjacency
from exontype.annotate.overlaps import OverlapHit
from exontype.errors import InvalidConfiguration


@pytest.fixture
def intron_hits(record_factory):
    """Hits for an intron query 100-200 flanked by exons of T1 and T2.

    T1 has exons on both sides; T2 only upstream; T3 overlaps the
    middle of the intron.
    """
    return [
        OverlapHit(0, record_factory(50, 100, "CDS", "T1")),
        OverlapHit(0, record_factory(200, 260, "UTR5", "T1")),
        OverlapHit(0, record_factory(40, 100, "exon", "T2", "lincRNA")),
        OverlapHit(0, record_factory(120, 180, "exon", "T3", "lincRNA")),
    ]


@pytest.fixture
def intron_queries(query_factory):
    return [query_factory(100, 200, index=0)]


class TestResolveAdjacency:
    """Tests for resolve_adjacency."""

    def test_from_only(self, intron_hits, intron_queries):
        """from keeps records ending at the query start."""
        subsets = resolve_adjacency(intron_hits, intron_queries, sets="from")
        assert [h.record.transcript_id for h in subsets.from_] == ["T1", "T2"]
        assert subsets.to is None
        assert subsets.overlap is None

    def test_to_only(self, intron_hits, intron_queries):
        """to keeps records starting at the query end."""
        subsets = resolve_adjacency(intron_hits, intron_queries, sets=["to"])
        assert [h.record.feature_type for h in subsets.to] == ["UTR5"]
        assert subsets.from_ is None

    def test_from_and_to_require_both_sides(self, intron_hits, intron_queries):
        """With from and to, transcripts flanking only one side are dropped."""
        subsets = resolve_adjacency(intron_hits, intron_queries, sets=("from", "to"))
        assert [h.record.feature_type for h in subsets.from_] == ["CDS"]
        assert [h.record.feature_type for h in subsets.to] == ["UTR5"]

    def test_overlap_unrestricted(self, intron_hits, intron_queries):
        """overlap keeps every hit, even alongside from and to."""
        subsets = resolve_adjacency(intron_hits, intron_queries)
        assert subsets.overlap == intron_hits
        assert len(subsets.from_) == 1

    def test_pairing_is_per_query(self, record_factory, query_factory):
        """A transcript flanking different queries on each side is not paired."""
        queries = [query_factory(100, 200, index=0), query_factory(300, 400, index=1)]
        hits = [
            OverlapHit(0, record_factory(50, 100, "CDS", "T1")),
            OverlapHit(1, record_factory(400, 450, "CDS", "T1")),
        ]
        subsets = resolve_adjacency(hits, queries, sets=("from", "to"))
        assert subsets.from_ == []
        assert subsets.to == []

    def test_from_never_in_to(self, record_factory, query_factory):
        """A record ending at the query start is never a to hit."""
        queries = [query_factory(100, 200, index=0)]
        hit = OverlapHit(0, record_factory(50, 100, "CDS"))
        subsets = resolve_adjacency([hit], queries, sets="from")
        assert subsets.from_ == [hit]
        subsets = resolve_adjacency([hit], queries, sets="to")
        assert subsets.to == []

    def test_single_base_query(self, record_factory, query_factory):
        """For a single-base query a record can be both from and to."""
        queries = [query_factory(100, 100, index=0)]
        hits = [
            OverlapHit(0, record_factory(50, 100, "CDS")),
            OverlapHit(0, record_factory(100, 150, "UTR3")),
        ]
        subsets = resolve_adjacency(hits, queries, sets=("from", "to"))
        assert len(subsets.from_) == 1
        assert len(subsets.to) == 1

    def test_accepts_mapping(self, intron_hits, intron_queries):
        """Queries may be given keyed by index."""
        by_index = {q.index: q for q in intron_queries}
        subsets = resolve_adjacency(intron_hits, by_index, sets="from")
        assert len(subsets.from_) == 2

    @pytest.mark.parametrize("sets", [(), "both", ("from", "upstream")])
    def test_invalid_sets(self, intron_hits, intron_queries, sets):
        """Empty or unknown set selections are rejected."""
        with pytest.raises(InvalidConfiguration):
            resolve_adjacency(intron_hits, intron_queries, sets=sets)


class TestAdjacencySets:
    """Tests for AdjacencySets accessors."""

    def test_items_skips_unrequested(self):
        sets = AdjacencySets(to=[], overlap=[])
        assert [name for name, _ in sets.items()] == ["to", "overlap"]

    def test_get(self):
        hits = [object()]
        sets = AdjacencySets(from_=hits)
        assert sets.get("from") is hits
        assert sets.get("overlap") is None
