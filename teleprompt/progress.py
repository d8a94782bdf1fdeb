"""Reading progress and per-token highlight state."""

from enum import Enum
from typing import List, Optional, Sequence

from .tokenizer import Token
from .word_index import WordIndex


class WordState(Enum):
    CURRENT = "current"
    BEFORE = "before-current"
    AFTER = "after-current"
    WHITESPACE = "whitespace"


def calculate_progress(word_index: WordIndex, position: Optional[int]) -> float:
    """
    Percentage of the content read, counting the current word as read.

    Args:
        word_index: Index of the session's word tokens
        position: Current token index, or None when not started

    Returns:
        float: 0.0 to 100.0; 0.0 when not started or when there are no words
    """
    total = word_index.total()
    if position is None or total == 0:
        return 0.0
    rank = word_index.position_of(position)
    if rank < 0:
        return 0.0
    return (rank + 1) / total * 100


def classify_token(word_index: WordIndex, position: Optional[int], token_index: int) -> WordState:
    rank = word_index.position_of(token_index)
    if rank < 0:
        return WordState.WHITESPACE
    if token_index == position:
        return WordState.CURRENT
    current_rank = word_index.position_of(position)
    if current_rank >= 0 and rank < current_rank:
        return WordState.BEFORE
    return WordState.AFTER


def classify_tokens(tokens: Sequence[Token], word_index: WordIndex,
                    position: Optional[int]) -> List[WordState]:
    """Highlight state of every token for the given position."""
    return [classify_token(word_index, position, i) for i in range(len(tokens))]
