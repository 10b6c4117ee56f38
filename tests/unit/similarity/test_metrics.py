"""
Unit tests for set-overlap similarity helpers.
"""
from fossilmind.similarity.metrics import as_percent, jaccard, shared_concepts


class TestJaccard:

    def test_empty_sets_score_zero(self):
        assert jaccard(set(), set()) == 0.0
        assert jaccard({"a"}, set()) == 0.0
        assert jaccard(None, {"a"}) == 0.0

    def test_identical_sets_score_one(self):
        tokens = {"graph", "node"}
        assert jaccard(tokens, tokens) == 1.0

    def test_half_overlap(self):
        assert jaccard({"a", "b", "c"}, {"b", "c", "d"}) == 0.5

    def test_symmetry(self):
        a = {"alpha", "beta", "gamma", "delta"}
        b = {"beta", "omega"}
        assert jaccard(a, b) == jaccard(b, a)

    def test_disjoint_sets_score_zero(self):
        assert jaccard({"a"}, {"b"}) == 0.0


class TestSharedConcepts:

    def test_only_long_tokens_are_concepts(self):
        a = {"graph", "node", "edge", "map"}
        b = {"graph", "node", "map", "tree"}
        assert shared_concepts(a, b) == ["graph", "node"]

    def test_concepts_are_capped(self):
        words = {f"word{i}" for i in range(10)}
        assert len(shared_concepts(words, words)) == 5
        assert len(shared_concepts(words, words, limit=2)) == 2

    def test_no_overlap(self):
        assert shared_concepts({"alpha"}, {"omega"}) == []


class TestAsPercent:

    def test_rounds_halves_up(self):
        assert as_percent(0.125) == 13
        assert as_percent(0.5) == 50
        assert as_percent(1.0) == 100
        assert as_percent(0.0) == 0
