"""
Unit tests for conflict detection.
"""
from fossilmind.configuration.models import ConflictConfig
from fossilmind.intelligence.conflicts import detect_conflicts, detect_semantic_opposition, has_negation


class TestNegation:

    def test_detects_negation_words(self):
        assert has_negation("Caching does not help here")
        assert has_negation("We can't ship without review")
        assert not has_negation("Caching helps here")
        assert not has_negation("")

    def test_matches_whole_words_only(self):
        assert not has_negation("Nothing is notable")


class TestSemanticOpposition:

    def test_antonym_pair_split_across_texts(self):
        assert detect_semantic_opposition("costs increase", "costs decrease") == [("increase", "decrease")]
        assert detect_semantic_opposition("costs decrease", "costs increase") == [("increase", "decrease")]

    def test_antonyms_within_one_text_do_not_count(self):
        assert detect_semantic_opposition("increase then decrease", "unrelated") == []

    def test_substrings_are_not_words(self):
        assert detect_semantic_opposition("the stopwatch", "starting line") == []


class TestDetectConflicts:

    def test_antonym_conflict_is_semantic(self, test_data_factory):
        existing = [test_data_factory.create_fossil("f1", "requirements should decrease efficiency")]
        conflicts = detect_conflicts("requirements should increase efficiency", existing)

        assert len(conflicts) == 1
        assert conflicts[0].fossil.id == "f1"
        assert conflicts[0].reason == "semantic"
        assert conflicts[0].similarity_percent == 60
        assert conflicts[0].oppositions == [("increase", "decrease")]

    def test_negation_conflict(self, test_data_factory):
        existing = [test_data_factory.create_fossil("f1", "caching does improve latency")]
        conflicts = detect_conflicts("caching does not improve latency", existing)

        assert [c.reason for c in conflicts] == ["negation"]

    def test_unrelated_texts_never_conflict(self, test_data_factory):
        existing = [test_data_factory.create_fossil("f1", "databases never need indexes")]
        assert detect_conflicts("bananas ripen quickly", existing) == []

    def test_near_duplicates_are_not_conflicts(self, test_data_factory):
        existing = [test_data_factory.create_fossil("f1", "small teams never ship slowly")]
        assert detect_conflicts("small teams never ship slowly", existing) == []

    def test_related_agreeing_texts_are_not_conflicts(self, test_data_factory):
        existing = [test_data_factory.create_fossil("f1", "small batches reduce deployment risk")]
        assert detect_conflicts("small batches reduce release risk", existing) == []

    def test_hidden_fossils_are_ignored(self, test_data_factory):
        existing = [
            test_data_factory.create_fossil("f1", "requirements should decrease efficiency", deleted=True),
            test_data_factory.create_fossil("f2", "requirements should decrease efficiency", superseded_by="f3"),
        ]
        assert detect_conflicts("requirements should increase efficiency", existing) == []

    def test_sorted_by_similarity(self, test_data_factory):
        existing = [
            test_data_factory.create_fossil("weak", "requirements should decrease morale"),
            test_data_factory.create_fossil("strong", "requirements should decrease efficiency"),
        ]
        conflicts = detect_conflicts("requirements should increase efficiency", existing)

        assert [c.fossil.id for c in conflicts] == ["strong", "weak"]

    def test_empty_text(self, test_data_factory):
        existing = [test_data_factory.create_fossil("f1", "anything at all")]
        assert detect_conflicts("", existing) == []
        assert detect_conflicts(None, existing) == []

    def test_custom_band(self, test_data_factory):
        existing = [test_data_factory.create_fossil("f1", "requirements should decrease efficiency")]
        config = ConflictConfig(min_similarity=0.7, max_similarity=0.9)

        assert detect_conflicts("requirements should increase efficiency", existing, config=config) == []
