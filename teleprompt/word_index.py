"""Navigation over the word tokens of a tokenized text."""

from bisect import bisect_left, bisect_right
from typing import Optional, Sequence

from .tokenizer import Token

# Position value meaning "no current word" (not started or reset)
NONE = None


class WordIndex:
    """
    Ordered index of the word tokens in a token sequence.

    Built once per session. Besides the ordered list of word token indices it
    keeps a reverse map, sized to the token count, from every token index to
    its word rank (or -1 for whitespace) so lookups done on each timer tick
    never scan the word list.
    """

    def __init__(self, tokens: Sequence[Token]):
        self._words = tuple(i for i, token in enumerate(tokens) if token.is_word)
        self._ranks = [-1] * len(tokens)
        for rank, token_index in enumerate(self._words):
            self._ranks[token_index] = rank

    def __len__(self):
        return len(self._words)

    @property
    def word_indices(self) -> tuple:
        return self._words

    def total(self) -> int:
        """Number of word tokens."""
        return len(self._words)

    def position_of(self, token_index: Optional[int]) -> int:
        """
        Get the 0-based rank of a word token among all word tokens.

        Args:
            token_index: Index into the token sequence

        Returns:
            int: The word rank, or -1 if the token is not a word or the index
            is out of range
        """
        if token_index is None or not 0 <= token_index < len(self._ranks):
            return -1
        return self._ranks[token_index]

    def token_at(self, rank: int) -> Optional[int]:
        """Inverse of position_of: the token index of the word with this rank."""
        if 0 <= rank < len(self._words):
            return self._words[rank]
        return NONE

    def first(self) -> Optional[int]:
        return self._words[0] if self._words else NONE

    def last(self) -> Optional[int]:
        return self._words[-1] if self._words else NONE

    def next(self, token_index: Optional[int]) -> Optional[int]:
        """
        Get the word token following token_index.

        For a whitespace token this is the first word after it.

        Returns:
            The next word's token index, or None at the end of the content or
            for an out-of-range index
        """
        rank = self.position_of(token_index)
        if rank >= 0:
            return self.token_at(rank + 1)
        if token_index is None or not 0 <= token_index < len(self._ranks):
            return NONE
        following = bisect_right(self._words, token_index)
        return self.token_at(following)

    def previous(self, token_index: Optional[int]) -> Optional[int]:
        """Get the word token preceding token_index, or None at the start."""
        rank = self.position_of(token_index)
        if rank >= 0:
            return self.token_at(rank - 1)
        if token_index is None or not 0 <= token_index < len(self._ranks):
            return NONE
        preceding = bisect_left(self._words, token_index) - 1
        return self.token_at(preceding)
