"""
Unit tests for tokenization and the token index.
"""
from concurrent.futures import ThreadPoolExecutor

from fossilmind.models.fossil import Fossil
from fossilmind.similarity.tokenizer import EMPTY_TOKENS, TokenIndex, Tokenizer, ensure_index, tokenize


class TestTokenize:
    """Lexical token extraction."""

    def test_empty_and_missing_text_yield_empty_set(self):
        assert tokenize("") == frozenset()
        assert tokenize(None) == frozenset()

    def test_short_words_are_dropped(self):
        assert tokenize("An ox is big") == frozenset({"big"})

    def test_hyphenated_words_stay_whole(self):
        assert tokenize("Well-known trade-offs") == frozenset({"well-known", "trade-offs"})

    def test_case_is_normalized(self):
        assert tokenize("Graph GRAPH graph") == frozenset({"graph"})

    def test_apostrophes_are_kept_inside_tokens(self):
        assert "don't" in tokenize("Don't guess, measure")

    def test_punctuation_splits_tokens(self):
        assert tokenize("latency, throughput; cost.") == frozenset({"latency", "throughput", "cost"})


class TestTokenizer:
    """Memoizing tokenizer behaviour."""

    def test_repeated_text_hits_cache(self):
        tokenizer = Tokenizer(cache_size=10)
        first = tokenizer("cache these words")
        second = tokenizer("cache these words")

        assert first is second
        assert tokenizer.stats["hits"] == 1
        assert tokenizer.stats["misses"] == 1

    def test_oldest_entry_is_evicted(self):
        tokenizer = Tokenizer(cache_size=2)
        tokenizer("first text")
        tokenizer("second text")
        tokenizer("third text")

        assert len(tokenizer) == 2
        assert tokenizer.stats["evictions"] == 1

    def test_disabled_cache_gives_identical_results(self):
        cached = Tokenizer(cache_size=100)
        uncached = Tokenizer(cache_size=0)
        text = "Invariants survive refactors when tests pin them"

        assert cached(text) == uncached(text) == tokenize(text)
        assert len(uncached) == 0

    def test_clear_empties_cache(self):
        tokenizer = Tokenizer()
        tokenizer("something worth caching")
        tokenizer.clear()
        assert len(tokenizer) == 0

    def test_empty_text_is_not_cached(self):
        tokenizer = Tokenizer()
        assert tokenizer("") is EMPTY_TOKENS
        assert len(tokenizer) == 0

    def test_shared_tokenizer_across_threads(self):
        tokenizer = Tokenizer(cache_size=8)
        texts = [f"thread safe cache entry{i % 12}" for i in range(200)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(tokenizer, texts))

        assert results == [tokenize(t) for t in texts]
        assert len(tokenizer) <= 8
        assert tokenizer.stats["hits"] + tokenizer.stats["misses"] <= len(texts)


class TestTokenIndex:
    """Token index snapshots."""

    def test_index_covers_only_visible_fossils(self):
        fossils = [
            Fossil(id="a", invariant="visible fossil text", probe_intent="why care"),
            Fossil(id="b", invariant="deleted fossil", deleted=True),
            Fossil(id="c", invariant="replaced fossil", superseded_by="a"),
        ]
        index = TokenIndex.build(fossils)

        assert set(index) == {"a"}
        assert index["a"] == frozenset({"visible", "fossil", "text", "why", "care"})

    def test_tokens_for_unindexed_fossil_falls_back_to_invariant(self):
        index = TokenIndex.build([])
        fossil = Fossil(id="x", invariant="fallback tokens here", probe_intent="ignored intent")

        assert index.tokens_for(fossil) == frozenset({"fallback", "tokens", "here"})

    def test_index_uses_supplied_tokenizer(self):
        tokenizer = Tokenizer(cache_size=5)
        index = TokenIndex.build([Fossil(id="a", invariant="shared cache")], tokenizer)

        assert index.tokenizer is tokenizer
        assert len(tokenizer) == 1

    def test_ensure_index_accepts_plain_mapping(self):
        index = ensure_index({"a": {"one", "two"}}, [])

        assert isinstance(index, TokenIndex)
        assert index["a"] == frozenset({"one", "two"})

    def test_ensure_index_returns_existing_index(self):
        index = TokenIndex.build([])
        assert ensure_index(index, []) is index
