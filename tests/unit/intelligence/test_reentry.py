"""
Unit tests for re-entry detection and chain traversal.
"""
import logging

from fossilmind.intelligence.reentry import chain_members, detect_reentry, get_trail


class TestDetectReentry:

    def test_short_query_returns_none(self, test_data_factory):
        fossils = [test_data_factory.create_fossil("f1", "abcd")]
        assert detect_reentry("abcd", fossils) is None
        assert detect_reentry("   ab   ", fossils) is None
        assert detect_reentry(None, fossils) is None

    def test_probe_intent_substring_match(self, test_data_factory):
        fossil = test_data_factory.create_fossil("f1", "code review scales with small batches",
                                                 probe_intent="how do teams scale code review")
        assert detect_reentry("How do teams scale code review practices?", [fossil]) is fossil

    def test_token_overlap_match(self, test_data_factory):
        target = test_data_factory.create_fossil("f1", "feature flags decouple deploy from release")
        other = test_data_factory.create_fossil("f2", "write the test before the fix")

        assert detect_reentry("feature flags decouple deploy", [other, target]) is target

    def test_below_threshold_returns_none(self, test_data_factory):
        fossil = test_data_factory.create_fossil("f1", "feature flags decouple deploy from release")
        assert detect_reentry("gardening tips for spring", [fossil]) is None

    def test_hidden_fossils_are_ignored(self, test_data_factory):
        fossil = test_data_factory.create_fossil("f1", "feature flags decouple deploy", deleted=True)
        assert detect_reentry("feature flags decouple deploy", [fossil]) is None


class TestChains:

    def _chain(self, factory):
        root = factory.create_fossil("a", "root")
        middle = factory.create_fossil("b", "middle", reentry_of="a")
        leaf = factory.create_fossil("c", "leaf", reentry_of="b")
        sibling = factory.create_fossil("d", "sibling", reentry_of="a")
        stranger = factory.create_fossil("z", "stranger")
        return [root, middle, leaf, sibling, stranger]

    def test_trail_nearest_first(self, test_data_factory):
        fossils = self._chain(test_data_factory)
        assert [f.id for f in get_trail(fossils[2], fossils)] == ["b", "a"]

    def test_trail_stops_at_dangling_parent(self, test_data_factory):
        orphan = test_data_factory.create_fossil("o", "orphan", reentry_of="missing")
        assert get_trail(orphan, [orphan]) == []

    def test_trail_stops_at_deleted_parent(self, test_data_factory):
        parent = test_data_factory.create_fossil("p", "parent", deleted=True)
        child = test_data_factory.create_fossil("c", "child", reentry_of="p")
        assert get_trail(child, [parent, child]) == []

    def test_cycle_is_truncated(self, test_data_factory, caplog):
        a = test_data_factory.create_fossil("a", "first", reentry_of="b")
        b = test_data_factory.create_fossil("b", "second", reentry_of="a")

        with caplog.at_level(logging.WARNING, logger="fossilmind.intelligence.reentry"):
            trail = get_trail(a, [a, b])

        assert [f.id for f in trail] == ["b"]
        assert "cycle" in caplog.text

    def test_self_reference_is_safe(self, test_data_factory):
        loop = test_data_factory.create_fossil("a", "self", reentry_of="a")
        assert get_trail(loop, [loop]) == []
        assert chain_members(loop, [loop]) == {"a"}

    def test_chain_members_from_any_node(self, test_data_factory):
        fossils = self._chain(test_data_factory)
        expected = {"a", "b", "c", "d"}

        assert chain_members(fossils[0], fossils) == expected
        assert chain_members(fossils[2], fossils) == expected
        assert chain_members(fossils[4], fossils) == {"z"}

    def test_chain_members_with_cycle(self, test_data_factory):
        a = test_data_factory.create_fossil("a", "first", reentry_of="b")
        b = test_data_factory.create_fossil("b", "second", reentry_of="a")
        assert chain_members(a, [a, b]) == {"a", "b"}
