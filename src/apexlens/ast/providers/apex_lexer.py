"""
Apex tokenizer.

Turns Apex source into a flat token list. Comments are dropped, string
literals are kept as single tokens and inline SOQL / SOSL literals
(``[SELECT ...]`` / ``[FIND ...]``) are captured whole so the parser can hand
them to the SOQL provider untouched.
"""

from dataclasses import dataclass
from enum import Enum

from apexlens.shared.domain.exceptions import ApexParseError


class TokenKind(Enum):
    """Token categories."""

    IDENT = "ident"
    NUMBER = "number"
    STRING = "string"
    OP = "op"
    SOQL = "soql"
    SOSL = "sosl"


@dataclass
class Token:
    """A lexical token with its source span (offsets are absolute)."""

    kind: TokenKind
    text: str
    line: int
    column: int
    end_line: int
    end_column: int
    start: int
    end: int

    def is_op(self, text: str) -> bool:
        return self.kind == TokenKind.OP and self.text == text

    def is_word(self, word: str) -> bool:
        return self.kind == TokenKind.IDENT and self.text.lower() == word


MULTI_CHAR_OPS = (
    "===", "!==", "==", "!=", "<=", ">=", "&&", "||", "++", "--",
    "+=", "-=", "*=", "/=", "&=", "|=", "^=", "?.", "??", "=>",
)

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}


class ApexLexer:
    """Single-pass tokenizer tracking 1-indexed lines and 0-indexed columns."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 0
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the whole source.

        Raises:
            ApexParseError: on unterminated comments, strings or query literals
        """
        src = self.source
        while self.pos < len(src):
            ch = src[self.pos]
            nxt = src[self.pos + 1] if self.pos + 1 < len(src) else ""

            if ch in " \t\r\n\f":
                self._advance(1)
            elif ch == "/" and nxt == "/":
                end = src.find("\n", self.pos)
                self._advance((end if end != -1 else len(src)) - self.pos)
            elif ch == "/" and nxt == "*":
                end = src.find("*/", self.pos + 2)
                if end == -1:
                    raise ApexParseError("Unterminated block comment", self.line, self.column)
                self._advance(end + 2 - self.pos)
            elif ch == "'":
                self._emit(TokenKind.STRING, self._string_length(self.pos))
            elif ch == "[" and self._starts_query_literal():
                kind = TokenKind.SOQL if self._next_word().lower() == "select" else TokenKind.SOSL
                self._emit(kind, self._query_literal_length())
            elif ch.isalpha() or ch == "_":
                end = self.pos
                while end < len(src) and (src[end].isalnum() or src[end] == "_"):
                    end += 1
                self._emit(TokenKind.IDENT, end - self.pos)
            elif ch.isdigit():
                end = self.pos
                while end < len(src) and (src[end].isalnum() or src[end] == "."):
                    end += 1
                self._emit(TokenKind.NUMBER, end - self.pos)
            else:
                for op in MULTI_CHAR_OPS:
                    if src.startswith(op, self.pos):
                        self._emit(TokenKind.OP, len(op))
                        break
                else:
                    self._emit(TokenKind.OP, 1)

        return self.tokens

    def _advance(self, count: int) -> None:
        chunk = self.source[self.pos:self.pos + count]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(chunk) - chunk.rfind("\n") - 1
        else:
            self.column += len(chunk)
        self.pos += count

    def _emit(self, kind: TokenKind, length: int) -> None:
        start, line, column = self.pos, self.line, self.column
        self._advance(length)
        self.tokens.append(
            Token(
                kind=kind,
                text=self.source[start:self.pos],
                line=line,
                column=column,
                end_line=self.line,
                end_column=self.column,
                start=start,
                end=self.pos,
            )
        )

    def _string_length(self, start: int) -> int:
        src = self.source
        i = start + 1
        while i < len(src):
            if src[i] == "\\":
                i += 2
                continue
            if src[i] == "'":
                return i + 1 - start
            if src[i] == "\n":
                break
            i += 1
        raise ApexParseError("Unterminated string literal", self.line, self.column)

    def _next_word(self) -> str:
        src = self.source
        i = self.pos + 1
        while i < len(src) and src[i].isspace():
            i += 1
        end = i
        while end < len(src) and (src[end].isalnum() or src[end] == "_"):
            end += 1
        return src[i:end]

    def _starts_query_literal(self) -> bool:
        return self._next_word().lower() in ("select", "find")

    def _query_literal_length(self) -> int:
        src = self.source
        depth = 0
        i = self.pos
        while i < len(src):
            ch = src[i]
            if ch == "'":
                i += self._string_length(i)
                continue
            if ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
                if depth == 0:
                    return i + 1 - self.pos
            i += 1
        raise ApexParseError("Unterminated query literal", self.line, self.column)


def match_delimiters(tokens: list[Token]) -> dict[int, int]:
    """Map every opening delimiter index to its closing index and back.

    Raises:
        ApexParseError: on unbalanced or mismatched delimiters
    """
    stack: list[int] = []
    matches: dict[int, int] = {}
    for index, token in enumerate(tokens):
        if token.kind != TokenKind.OP:
            continue
        if token.text in OPENERS:
            stack.append(index)
        elif token.text in CLOSERS:
            if not stack or tokens[stack[-1]].text != CLOSERS[token.text]:
                raise ApexParseError(f"Unexpected '{token.text}'", token.line, token.column)
            opener = stack.pop()
            matches[opener] = index
            matches[index] = opener
    if stack:
        token = tokens[stack[-1]]
        raise ApexParseError(f"Unclosed '{token.text}'", token.line, token.column)
    return matches
