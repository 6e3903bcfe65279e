"""On-demand tokenizer for authorization expressions.

Tokens are produced one at a time by `Lexer.next_token()`; no token list is
built up front.

Grammar of a single token:
    - `(` `)` `&` `|` are single-character tokens
    - identifiers are runs of Unicode letters, decimal digits, `_`, `-`, `.`, `:`
    - quoted strings start with `"` and may contain `\\"` and `\\\\` escapes

Quoted strings are returned as the raw text between the quotes. An invalid
escape (a backslash followed by anything else) ends the string early: the text
before the backslash is returned and lexing resumes at the character after it.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

WHITESPACE = frozenset(" \t\n\r")
IDENTIFIER_PUNCTUATION = frozenset("_-.:")


class TokenKind(Enum):
    """Kinds of tokens produced by the lexer."""

    ACCESS_TOKEN = "access_token"
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    AND = "&"
    OR = "|"
    END = "end"
    ERROR = "error"


_SINGLE_CHAR_TOKENS = {
    "(": TokenKind.OPEN_PAREN,
    ")": TokenKind.CLOSE_PAREN,
    "&": TokenKind.AND,
    "|": TokenKind.OR,
}


@dataclass(frozen=True)
class Token:
    """A single lexed token.

    `value` holds the label text for ACCESS_TOKEN and the offending
    character for ERROR; it is empty otherwise.
    """

    kind: TokenKind
    value: str = ""
    position: int = 0


def is_identifier_char(ch: str) -> bool:
    """Return True if `ch` may appear in a bare identifier."""
    return ch.isalpha() or ch.isdecimal() or ch in IDENTIFIER_PUNCTUATION


class Lexer:
    """
    Tokenizer over a single expression string.

    Examples:
        >>> lexer = Lexer("a & b")
        >>> [t.kind.name for t in lexer]
        ['ACCESS_TOKEN', 'AND', 'ACCESS_TOKEN']
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0

    @property
    def source(self) -> str:
        return self._source

    @property
    def position(self) -> int:
        """Zero-based index of the next unread character."""
        return self._pos

    def _peek(self) -> str:
        if self._pos >= len(self._source):
            return ""
        return self._source[self._pos]

    def _skip_whitespace(self) -> None:
        while self._peek() in WHITESPACE:
            self._pos += 1

    def next_token(self) -> Token:
        """
        Read the next token.

        Returns END on every call once the input is exhausted. An ERROR token
        does not advance the cursor, so it is returned again on the next call.

        Returns:
            The next Token in the source
        """
        self._skip_whitespace()
        start = self._pos
        ch = self._peek()

        if not ch:
            return Token(TokenKind.END, position=start)

        if ch in _SINGLE_CHAR_TOKENS:
            self._pos += 1
            return Token(_SINGLE_CHAR_TOKENS[ch], position=start)

        if ch == '"':
            return Token(TokenKind.ACCESS_TOKEN, self._read_string(), start)

        if is_identifier_char(ch):
            return Token(TokenKind.ACCESS_TOKEN, self._read_identifier(), start)

        return Token(TokenKind.ERROR, ch, start)

    def _read_identifier(self) -> str:
        start = self._pos
        while self._peek() and is_identifier_char(self._peek()):
            self._pos += 1
        return self._source[start : self._pos]

    def _read_string(self) -> str:
        # Cursor is on the opening quote
        self._pos += 1
        start = self._pos
        source = self._source

        while self._pos < len(source):
            ch = source[self._pos]
            if ch == '"':
                value = source[start : self._pos]
                self._pos += 1
                return value
            if ch == "\\":
                following = source[self._pos + 1 : self._pos + 2]
                if following not in ('"', "\\"):
                    # Truncate at the invalid escape, resume after the backslash
                    value = source[start : self._pos]
                    self._pos += 1
                    return value
                self._pos += 2
                continue
            self._pos += 1

        # Unterminated string runs to the end of input
        return source[start:]

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens until END, or until (and including) the first ERROR."""
        while True:
            token = self.next_token()
            if token.kind is TokenKind.END:
                return
            yield token
            if token.kind is TokenKind.ERROR:
                return
