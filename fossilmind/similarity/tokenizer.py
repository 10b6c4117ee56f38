"""
Tokenizer and token index.

Text is reduced to a set of lowercase lexical tokens: alphanumeric runs of at
least three characters that may carry internal hyphens or apostrophes. Token
sets are frozensets so a cached set can be shared safely between callers.
"""

import logging
import re
import threading
from collections import OrderedDict
from collections.abc import Mapping
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9'-]{2,}")

EMPTY_TOKENS: FrozenSet[str] = frozenset()

DEFAULT_CACHE_SIZE = 1000

TokenizeFn = Callable[[Optional[str]], FrozenSet[str]]


def tokenize(text: Optional[str]) -> FrozenSet[str]:
    """Uncached tokenization. Empty or absent text yields an empty set."""
    if not text:
        return EMPTY_TOKENS
    return frozenset(TOKEN_PATTERN.findall(text.lower()))


class Tokenizer:
    """
    Memoizing tokenizer with a bounded cache.

    The cache is owned by the instance rather than the process, evicts the
    oldest inserted entry on overflow, and is guarded by a lock so one instance
    can be shared between threads. ``cache_size=0`` disables caching; results
    are identical either way.
    """

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE):
        self.cache_size = max(int(cache_size), 0)
        self._cache: "OrderedDict[str, FrozenSet[str]]" = OrderedDict()
        self._lock = threading.Lock()
        self.stats = {'hits': 0, 'misses': 0, 'evictions': 0}

    def __call__(self, text: Optional[str]) -> FrozenSet[str]:
        return self.tokenize(text)

    def tokenize(self, text: Optional[str]) -> FrozenSet[str]:
        if not text:
            return EMPTY_TOKENS
        if self.cache_size == 0:
            return tokenize(text)

        with self._lock:
            cached = self._cache.get(text)
            if cached is not None:
                self.stats['hits'] += 1
                return cached

        tokens = tokenize(text)

        with self._lock:
            # Another thread may have filled the slot meanwhile; keep the first set
            existing = self._cache.get(text)
            if existing is not None:
                return existing
            if len(self._cache) >= self.cache_size:
                self._cache.popitem(last=False)
                self.stats['evictions'] += 1
            self._cache[text] = tokens
            self.stats['misses'] += 1
        return tokens

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class TokenIndex(Mapping):
    """
    Immutable snapshot mapping fossil id to its token set.

    Built from ``probe_intent + invariant`` of every visible fossil. Rebuild a
    new index when the fossil collection changes; an index is never mutated.
    """

    def __init__(self, tokens_by_id: Optional[Dict[str, FrozenSet[str]]] = None,
                 tokenizer: Optional[TokenizeFn] = None):
        self._tokens: Dict[str, FrozenSet[str]] = dict(tokens_by_id or {})
        self._tokenizer: TokenizeFn = tokenizer if tokenizer is not None else tokenize

    @classmethod
    def build(cls, fossils: Iterable, tokenizer: Optional[TokenizeFn] = None) -> "TokenIndex":
        tok = tokenizer if tokenizer is not None else tokenize
        tokens = {f.id: tok(f.composite_text) for f in fossils if f.is_visible}
        logger.debug(f"Built token index for {len(tokens)} fossils")
        return cls(tokens, tok)

    def __getitem__(self, fossil_id: str) -> FrozenSet[str]:
        return self._tokens[fossil_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def tokenizer(self) -> TokenizeFn:
        return self._tokenizer

    def tokens_for(self, fossil) -> FrozenSet[str]:
        """Indexed tokens for a fossil, falling back to tokenizing its invariant."""
        tokens = self._tokens.get(fossil.id)
        if tokens is None:
            tokens = self._tokenizer(fossil.invariant)
        return tokens


def ensure_index(token_index, fossils: Iterable, tokenizer: Optional[TokenizeFn] = None) -> TokenIndex:
    """Accept a TokenIndex, a plain mapping, or None and return a TokenIndex."""
    if isinstance(token_index, TokenIndex):
        return token_index
    if token_index is None:
        return TokenIndex.build(fossils, tokenizer)
    return TokenIndex({k: frozenset(v) for k, v in token_index.items()}, tokenizer)
