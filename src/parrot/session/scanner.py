"""Tokenizer for the interactive command line."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from parrot.errors import UnterminatedQuote

QUOTES = ("'", '"')


class TokenKind(Enum):
    WORD = "word"
    QUOTED = "quoted"
    FLAG = "flag"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    offset: int


def scan(raw: str) -> list[Token]:
    """Split a raw command line into tokens.

    Whitespace separates tokens unless it is inside matching quotes. A token
    that opens with a quote is a QUOTED token; an unquoted token starting with
    '-' is a FLAG with its dashes removed; anything else is a WORD.
    """
    tokens: list[Token] = []
    i, n = 0, len(raw)
    while i < n:
        if raw[i].isspace():
            i += 1
            continue

        start = i
        parts: list[str] = []
        while i < n and not raw[i].isspace():
            ch = raw[i]
            if ch in QUOTES:
                end = raw.find(ch, i + 1)
                if end == -1:
                    raise UnterminatedQuote(i)
                parts.append(raw[i + 1 : end])
                i = end + 1
            else:
                parts.append(ch)
                i += 1
        text = "".join(parts)

        if raw[start] in QUOTES:
            kind = TokenKind.QUOTED
        elif raw[start] == "-":
            kind = TokenKind.FLAG
            text = text.lstrip("-")
        else:
            kind = TokenKind.WORD
        tokens.append(Token(kind, text, start))
    return tokens
