from .metrics import jaccard, shared_concepts, as_percent
from .tokenizer import tokenize, Tokenizer, TokenIndex, ensure_index

__all__ = ["jaccard", "shared_concepts", "as_percent", "tokenize", "Tokenizer", "TokenIndex", "ensure_index"]
