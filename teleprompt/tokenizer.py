"""Whitespace tokenization for the Teleprompt reader."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List

_TOKEN_PATTERN = re.compile(r"\s+|\S+")


class TokenKind(Enum):
    WORD = "word"
    WHITESPACE = "whitespace"


@dataclass(frozen=True)
class Token:
    """A word or a run of whitespace, in the order it appears in the content."""

    kind: TokenKind
    text: str

    @property
    def is_word(self) -> bool:
        return self.kind is TokenKind.WORD


def tokenize(content: str) -> List[Token]:
    """
    Split content into alternating word and whitespace tokens.

    Whitespace runs are kept as their own tokens so that joining the text of
    every token gives back the original content exactly.

    Args:
        content: Raw text to split

    Returns:
        List of tokens; empty for empty content
    """
    tokens = []
    for match in _TOKEN_PATTERN.finditer(content):
        text = match.group(0)
        kind = TokenKind.WHITESPACE if text.isspace() else TokenKind.WORD
        tokens.append(Token(kind, text))
    return tokens


def join_tokens(tokens: List[Token]) -> str:
    """Rebuild the content a token list was made from."""
    return "".join(token.text for token in tokens)
