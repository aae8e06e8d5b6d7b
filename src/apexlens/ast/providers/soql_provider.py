"""
SOQL AST Provider.

Splits an inline SOQL literal into clause nodes so detectors can ask a query
which clauses it has instead of searching its text. Clause keywords only
count outside parentheses and string literals, which keeps a sub-select's
own clauses out of the enclosing query.

Node layout::

    QUERY (value=query text, attributes: structured, nested, fields)
      SELECT_CLAUSE (attributes: fields)
        QUERY (nested=True)        # projected sub-select
      FROM_CLAUSE (name=object)
      WHERE_CLAUSE
        QUERY (nested=True)        # semi-join sub-select
      LIMIT_CLAUSE ...
"""

import re
from dataclasses import dataclass

from apexlens.ast.domain.enums import ApexNodeType
from apexlens.ast.domain.models import ASTNode, SourceLocation

_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Single keywords, or (first, second) pairs that only form a clause together.
_CLAUSE_KEYWORDS: list[tuple[tuple[str, ...], ApexNodeType]] = [
    (("select",), ApexNodeType.SELECT_CLAUSE),
    (("from",), ApexNodeType.FROM_CLAUSE),
    (("using", "scope"), ApexNodeType.USING_SCOPE_CLAUSE),
    (("where",), ApexNodeType.WHERE_CLAUSE),
    (("with",), ApexNodeType.WITH_CLAUSE),
    (("group", "by"), ApexNodeType.GROUP_BY_CLAUSE),
    (("having",), ApexNodeType.HAVING_CLAUSE),
    (("order", "by"), ApexNodeType.ORDER_BY_CLAUSE),
    (("limit",), ApexNodeType.LIMIT_CLAUSE),
    (("offset",), ApexNodeType.OFFSET_CLAUSE),
    (("for", "view"), ApexNodeType.FOR_CLAUSE),
    (("for", "update"), ApexNodeType.FOR_CLAUSE),
    (("for", "reference"), ApexNodeType.FOR_CLAUSE),
    (("update", "tracking"), ApexNodeType.UPDATE_CLAUSE),
    (("update", "viewstat"), ApexNodeType.UPDATE_CLAUSE),
    (("all", "rows"), ApexNodeType.ALL_ROWS_CLAUSE),
]


class SOQLSyntaxError(ValueError):
    """The query text does not have a recognisable clause structure."""


@dataclass
class _SoqlToken:
    text: str
    start: int
    end: int
    is_word: bool = False
    is_string: bool = False


def _tokenize(text: str) -> list[_SoqlToken]:
    tokens: list[_SoqlToken] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch.isspace():
            i += 1
        elif ch == "'":
            j = i + 1
            while j < len(text) and text[j] != "'":
                j += 2 if text[j] == "\\" else 1
            if j >= len(text):
                raise SOQLSyntaxError("Unterminated string literal in query")
            tokens.append(_SoqlToken(text[i:j + 1], i, j + 1, is_string=True))
            i = j + 1
        else:
            match = _WORD_RE.match(text, i)
            if match:
                tokens.append(_SoqlToken(match.group(), i, match.end(), is_word=True))
                i = match.end()
            else:
                tokens.append(_SoqlToken(ch, i, i + 1))
                i += 1
    return tokens


def _depths(tokens: list[_SoqlToken]) -> list[int]:
    """Parenthesis depth before each token."""
    depths: list[int] = []
    depth = 0
    for token in tokens:
        if token.text == ")":
            depth -= 1
            if depth < 0:
                raise SOQLSyntaxError("Unbalanced parentheses in query")
        depths.append(depth)
        if token.text == "(":
            depth += 1
    if depth != 0:
        raise SOQLSyntaxError("Unbalanced parentheses in query")
    return depths


def _clause_at(tokens: list[_SoqlToken], index: int) -> tuple[ApexNodeType, int] | None:
    """Return (clause type, keyword token count) when a clause starts at ``index``."""
    for words, node_type in _CLAUSE_KEYWORDS:
        if index + len(words) > len(tokens):
            continue
        if all(
            tokens[index + k].is_word and tokens[index + k].text.lower() == word
            for k, word in enumerate(words)
        ):
            return node_type, len(words)
    return None


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def strip_brackets(literal: str) -> str:
    """Remove the surrounding ``[`` ``]`` of an inline query literal."""
    text = literal.strip()
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    return text.strip()


class SOQLASTProvider:
    """Parses SOQL text into a QUERY node with clause children."""

    name = "soql-structural"

    def parse(
        self,
        query_text: str,
        unit_name: str = "<string>",
        start_line: int = 1,
        nested: bool = False,
    ) -> ASTNode:
        """
        Parse a SOQL query (with or without surrounding brackets).

        Never raises for malformed queries: the returned node is marked
        ``structured=False`` and carries no clause children, so callers fall
        back to text inspection.
        """
        text = strip_brackets(query_text)
        end_line = start_line + text.count("\n")
        node = ASTNode(
            node_type=ApexNodeType.QUERY,
            value=normalize_whitespace(text),
            location=SourceLocation(unit_name, start_line, 0, end_line, 0),
            attributes={"structured": False, "nested": nested, "fields": [], "raw_text": text},
        )
        try:
            clauses = self._parse_clauses(text, unit_name, start_line)
        except SOQLSyntaxError:
            return node

        node.children = clauses
        node.attributes["structured"] = True
        select = node.child_of_type(ApexNodeType.SELECT_CLAUSE)
        node.attributes["fields"] = list(select.attributes.get("fields", [])) if select else []
        return node

    def _parse_clauses(self, text: str, unit_name: str, start_line: int) -> list[ASTNode]:
        tokens = _tokenize(text)
        depths = _depths(tokens)
        if not tokens or not (tokens[0].is_word and tokens[0].text.lower() == "select"):
            raise SOQLSyntaxError("Query must start with SELECT")

        # (clause type, keyword start token, body start token)
        starts: list[tuple[ApexNodeType, int, int]] = []
        i = 0
        while i < len(tokens):
            found = _clause_at(tokens, i) if depths[i] == 0 else None
            if found:
                node_type, width = found
                starts.append((node_type, i, i + width))
                i += width
            else:
                i += 1

        if not any(node_type == ApexNodeType.FROM_CLAUSE for node_type, _, _ in starts):
            raise SOQLSyntaxError("Query has no FROM clause")

        clauses: list[ASTNode] = []
        for position, (node_type, keyword_index, body_index) in enumerate(starts):
            end_index = starts[position + 1][1] if position + 1 < len(starts) else len(tokens)
            body_tokens = tokens[body_index:end_index]
            body_start = tokens[body_index].start if body_tokens else tokens[keyword_index].end
            body_end = tokens[end_index - 1].end if body_tokens else body_start
            body_text = text[body_start:body_end]
            line = start_line + text.count("\n", 0, tokens[keyword_index].start)

            clause = ASTNode(
                node_type=node_type,
                value=normalize_whitespace(body_text),
                location=SourceLocation(
                    unit_name, line, 0, start_line + text.count("\n", 0, body_end), 0
                ),
            )
            clause.children = self._subqueries(text, body_tokens, unit_name, start_line)

            if node_type == ApexNodeType.SELECT_CLAUSE:
                clause.attributes["fields"] = self._projected_fields(text, body_tokens)
            elif node_type == ApexNodeType.FROM_CLAUSE and body_tokens:
                clause.name = body_tokens[0].text
            clauses.append(clause)
        return clauses

    def _subqueries(
        self, text: str, body_tokens: list[_SoqlToken], unit_name: str, start_line: int
    ) -> list[ASTNode]:
        """Parse every ``(SELECT ...)`` group in a clause body as a nested query."""
        nested: list[ASTNode] = []
        i = 0
        while i < len(body_tokens) - 1:
            token = body_tokens[i]
            following = body_tokens[i + 1]
            if token.text == "(" and following.is_word and following.text.lower() == "select":
                close = self._closing_paren(body_tokens, i)
                inner = text[body_tokens[i + 1].start:body_tokens[close - 1].end]
                line = start_line + text.count("\n", 0, body_tokens[i + 1].start)
                nested.append(self.parse(inner, unit_name, line, nested=True))
                i = close + 1
            else:
                i += 1
        return nested

    @staticmethod
    def _closing_paren(tokens: list[_SoqlToken], open_index: int) -> int:
        depth = 0
        for index in range(open_index, len(tokens)):
            if tokens[index].text == "(":
                depth += 1
            elif tokens[index].text == ")":
                depth -= 1
                if depth == 0:
                    return index
        raise SOQLSyntaxError("Unbalanced parentheses in query")

    @staticmethod
    def _projected_fields(text: str, body_tokens: list[_SoqlToken]) -> list[str]:
        """
        Field names of the SELECT list, sub-selects excluded.

        An aliased item (``COUNT(Id) total``) is reported under its alias, the
        last whitespace-separated part of the item.
        """
        items: list[list[_SoqlToken]] = [[]]
        depth = 0
        for token in body_tokens:
            if token.text == "(":
                depth += 1
            elif token.text == ")":
                depth -= 1
            if token.text == "," and depth == 0:
                items.append([])
            else:
                items[-1].append(token)

        fields: list[str] = []
        for item in items:
            if not item:
                continue
            if item[0].text == "(" and len(item) > 1 and item[1].text.lower() == "select":
                continue
            item_text = normalize_whitespace(text[item[0].start:item[-1].end])
            parts = item_text.split(" ")
            name = parts[-1]
            if name.lower() == "as" and len(parts) > 1:
                name = parts[-2]
            fields.append(name)
        return fields


def query_clause(query: ASTNode, clause_type: ApexNodeType) -> ASTNode | None:
    """Direct clause accessor; sub-select clauses are never returned."""
    return query.child_of_type(clause_type)


def nested_queries(query: ASTNode) -> list[ASTNode]:
    """Sub-selects directly owned by this query's clauses."""
    return [
        child
        for clause in query.children
        for child in clause.children
        if child.node_type == ApexNodeType.QUERY
    ]
