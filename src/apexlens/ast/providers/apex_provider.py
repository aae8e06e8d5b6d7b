"""
Apex AST Provider.

Structural parser for Apex classes, triggers and anonymous blocks. It does
not type-check or resolve symbols; it recognises the shapes the detectors
visit:

- class / interface / trigger declarations and their members
- method and constructor declarations
- for / for-each / while / do-while loops
- local variable declarations, assignments and returns
- call expressions with their receiver qualifier (``Schema.getGlobalDescribe()``)
- inline SOQL literals, parsed into clauses by SOQLASTProvider

Everything else is kept as generic STATEMENT nodes so nesting is preserved.
"""

import time

from apexlens.ast.domain.enums import ApexNodeType, ParseStatus
from apexlens.ast.domain.models import ASTNode, ParseError, ParseResult, SourceLocation
from apexlens.ast.providers.apex_lexer import ApexLexer, Token, TokenKind, match_delimiters
from apexlens.ast.providers.soql_provider import SOQLASTProvider
from apexlens.shared.domain.exceptions import ApexParseError
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

MODIFIERS = {
    "public", "private", "protected", "global", "static", "final", "abstract",
    "virtual", "override", "transient", "webservice", "testmethod",
    "with", "without", "inherited", "sharing",
}

TYPE_KEYWORDS = {"class", "interface", "enum"}

# Words that start a statement and therefore can never be a declared type.
STATEMENT_KEYWORDS = {
    "return", "throw", "break", "continue", "insert", "update", "delete", "upsert",
    "undelete", "merge", "new", "if", "else", "for", "while", "do", "try", "catch",
    "finally", "switch", "when", "this", "super", "null", "true", "false",
}

# Identifiers followed by "(" that are not calls.
NON_CALL_WORDS = {"if", "for", "while", "catch", "switch", "return", "new", "super", "this"}


class ApexASTProvider:
    """
    Apex source parser producing the universal AST.

    Stateless; each ``parse`` call works on its own token stream, so one
    instance can be shared between scans.
    """

    name = "apex-structural"

    def __init__(self, soql_provider: SOQLASTProvider | None = None) -> None:
        self._soql = soql_provider or SOQLASTProvider()

    def parse(self, source_code: str, unit_name: str = "<string>") -> ParseResult:
        """
        Parse Apex source code.

        Never raises: syntax errors and internal parser failures (including
        recursion on pathologically nested input) become a FAILED result.

        Args:
            source_code: Apex class, trigger or anonymous block
            unit_name: Compilation unit name used in node locations

        Returns:
            ParseResult with the AST, or FAILED status and errors
        """
        start_time = time.time()
        try:
            root = _ApexParser(source_code, unit_name, self._soql).parse_compilation_unit()
        except ApexParseError as e:
            logger.debug("apex_parse_failed", unit_name=unit_name, error=str(e), line=e.line)
            return self._failed(unit_name, str(e), e.line, e.column, start_time)
        except Exception as e:
            logger.warning("apex_parser_error", unit_name=unit_name, error=str(e), error_type=type(e).__name__)
            return self._failed(unit_name, f"{type(e).__name__}: {e}", 1, 0, start_time)

        return ParseResult(
            status=ParseStatus.SUCCESS,
            provider_name=self.name,
            ast_root=root,
            parse_time_ms=(time.time() - start_time) * 1000,
            unit_name=unit_name,
        )

    def _failed(self, unit_name: str, message: str, line: int, column: int, start_time: float) -> ParseResult:
        return ParseResult(
            status=ParseStatus.FAILED,
            provider_name=self.name,
            errors=[ParseError(message=message, location=SourceLocation(unit_name, line, column, line, column))],
            parse_time_ms=(time.time() - start_time) * 1000,
            unit_name=unit_name,
        )


class _ApexParser:
    """Recursive-descent walker over a balanced token stream."""

    def __init__(self, source: str, unit_name: str, soql: SOQLASTProvider):
        self.unit_name = unit_name
        self.soql = soql
        self.tokens: list[Token] = ApexLexer(source).tokenize()
        self.matches = match_delimiters(self.tokens)
        self.pos = 0

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def _location(self, first: int, last: int) -> SourceLocation:
        # ``last`` may be one past the final token when a statement runs off the end of input.
        last_index = len(self.tokens) - 1
        start = self.tokens[min(first, last_index)]
        end = self.tokens[min(max(first, last), last_index)]
        return SourceLocation(self.unit_name, start.line, start.column, end.end_line, end.end_column)

    def _expect_op(self, text: str) -> int:
        token = self._peek()
        if token is None or not token.is_op(text):
            line = token.line if token else (self.tokens[-1].end_line if self.tokens else 1)
            column = token.column if token else 0
            raise ApexParseError(f"Expected '{text}'", line, column)
        self.pos += 1
        return self.pos - 1

    def _skip_annotation(self) -> None:
        # '@' Name ( '(' ... ')' )?
        self.pos += 1
        if self._peek() and self._peek().kind == TokenKind.IDENT:
            self.pos += 1
        if self._peek() and self._peek().is_op("("):
            self.pos = self.matches[self.pos] + 1

    def _skip_modifiers(self) -> None:
        while True:
            token = self._peek()
            if token is None:
                return
            if token.is_op("@"):
                self._skip_annotation()
            elif token.kind == TokenKind.IDENT and token.text.lower() in MODIFIERS:
                self.pos += 1
            else:
                return

    def _type_end(self, index: int, limit: int) -> int | None:
        """Index just past a type reference starting at ``index``, or None."""
        if index >= limit:
            return None
        token = self.tokens[index]
        if token.kind != TokenKind.IDENT or token.text.lower() in STATEMENT_KEYWORDS:
            return None
        i = index + 1
        while i < limit:
            token = self.tokens[i]
            if token.is_op(".") and i + 1 < limit and self.tokens[i + 1].kind == TokenKind.IDENT:
                i += 2
            elif token.is_op("<"):
                depth = 0
                while i < limit:
                    if self.tokens[i].is_op("<"):
                        depth += 1
                    elif self.tokens[i].is_op(">"):
                        depth -= 1
                        if depth == 0:
                            break
                    elif not (self.tokens[i].kind == TokenKind.IDENT or self.tokens[i].text in (",", ".")):
                        return None
                    i += 1
                if i >= limit:
                    return None
                i += 1
            elif token.is_op("[") and i + 1 < limit and self.tokens[i + 1].is_op("]"):
                i += 2
            else:
                break
        return i

    # ------------------------------------------------------------------
    # declarations
    # ------------------------------------------------------------------

    def parse_compilation_unit(self) -> ASTNode:
        root = ASTNode(
            node_type=ApexNodeType.COMPILATION_UNIT,
            name=self.unit_name,
            location=self._location(0, len(self.tokens) - 1) if self.tokens else None,
        )
        while self.pos < len(self.tokens):
            start = self.pos
            self._skip_modifiers()
            token = self._peek()
            if token is None:
                break
            if token.kind == TokenKind.IDENT and token.text.lower() in TYPE_KEYWORDS:
                root.children.append(self._parse_type_declaration(start))
            elif token.is_word("trigger"):
                root.children.append(self._parse_trigger(start))
            else:
                # Anonymous Apex: top-level statements
                self.pos = start
                root.children.append(self._parse_statement(len(self.tokens)))
        return root

    def _parse_type_declaration(self, start: int) -> ASTNode:
        keyword = self.tokens[self.pos].text.lower()
        self.pos += 1
        name_token = self._peek()
        name = name_token.text if name_token and name_token.kind == TokenKind.IDENT else None
        while self._peek() and not self._peek().is_op("{"):
            self.pos += 1
        open_index = self._expect_op("{")
        close_index = self.matches[open_index]
        node = ASTNode(
            node_type=ApexNodeType.CLASS,
            name=name,
            location=self._location(start, close_index),
            attributes={"kind": keyword},
        )
        if keyword == "enum":
            self.pos = close_index + 1
            return node
        while self.pos < close_index:
            member = self._parse_member(name, close_index)
            if member is not None:
                node.children.append(member)
        self.pos = close_index + 1
        return node

    def _parse_trigger(self, start: int) -> ASTNode:
        self.pos += 1
        name_token = self._peek()
        while self._peek() and not self._peek().is_op("{"):
            self.pos += 1
        open_index = self.pos
        body = self._parse_block()
        return ASTNode(
            node_type=ApexNodeType.CLASS,
            name=name_token.text if name_token else None,
            location=self._location(start, self.matches[open_index]),
            attributes={"kind": "trigger"},
            children=[body],
        )

    def _parse_member(self, class_name: str | None, limit: int) -> ASTNode | None:
        start = self.pos
        self._skip_modifiers()
        token = self._peek()
        if token is None or self.pos >= limit:
            self.pos = max(self.pos, limit)
            return None
        if token.is_op(";"):
            self.pos += 1
            return None
        if token.kind == TokenKind.IDENT and token.text.lower() in TYPE_KEYWORDS:
            return self._parse_type_declaration(start)
        if token.is_op("{"):
            return self._parse_block()

        # Constructor: Name '('
        next_token = self._peek(1)
        if (
            token.kind == TokenKind.IDENT
            and next_token is not None
            and next_token.is_op("(")
            and class_name is not None
            and token.text.lower() == class_name.lower()
        ):
            self.pos += 1
            return self._parse_callable(ApexNodeType.CONSTRUCTOR, token.text, start, limit)

        type_end = self._type_end(self.pos, limit)
        if type_end is None or type_end >= limit or self.tokens[type_end].kind != TokenKind.IDENT:
            # Unrecognised member shape; skip to the next ';' or block.
            return self._skip_unknown_member(limit)

        type_text = " ".join(t.text for t in self.tokens[self.pos:type_end])
        name_token = self.tokens[type_end]
        self.pos = type_end + 1
        following = self._peek()

        if following is not None and following.is_op("("):
            method = self._parse_callable(ApexNodeType.METHOD, name_token.text, start, limit)
            method.attributes["return_type"] = type_text
            return method
        if following is not None and following.is_op("{"):
            # Property with accessors
            open_index = self.pos
            body = self._parse_block()
            return ASTNode(
                node_type=ApexNodeType.FIELD,
                name=name_token.text,
                location=self._location(start, self.matches[open_index]),
                attributes={"type": type_text, "property": True},
                children=[body],
            )
        return self._parse_field(name_token, type_text, start, limit)

    def _parse_callable(self, node_type: ApexNodeType, name: str, start: int, limit: int) -> ASTNode:
        params_close = self.matches[self.pos]
        self.pos = params_close + 1
        while self.pos < limit and not (self._peek().is_op("{") or self._peek().is_op(";")):
            self.pos += 1
        node = ASTNode(node_type=node_type, name=name, location=self._location(start, params_close))
        if self.pos < limit and self._peek().is_op("{"):
            open_index = self.pos
            node.children.append(self._parse_block())
            node.location = self._location(start, self.matches[open_index])
        else:
            self.pos += 1
        return node

    def _parse_field(self, name_token: Token, type_text: str, start: int, limit: int) -> ASTNode:
        end = self._statement_end(limit)
        expression_start = self.pos
        if self._peek() and self._peek().is_op("="):
            expression_start += 1
        node = ASTNode(
            node_type=ApexNodeType.FIELD,
            name=name_token.text,
            location=self._location(start, max(start, end - 1)),
            attributes={"type": type_text},
            children=self._parse_expression(expression_start, end),
        )
        # Additional declarators: "Integer a = 1, b = 2;" share the type
        names = [name_token.text] + [
            self.tokens[i + 1].text
            for i in range(self.pos, end - 1)
            if self.tokens[i].is_op(",") and self.tokens[i + 1].kind == TokenKind.IDENT
            and self._depth_zero(self.pos, i)
        ]
        node.attributes["names"] = names
        self.pos = min(end + 1, limit)
        return node

    def _skip_unknown_member(self, limit: int) -> None:
        while self.pos < limit:
            token = self._peek()
            if token.is_op(";"):
                self.pos += 1
                return None
            if token.is_op("{"):
                self.pos = self.matches[self.pos] + 1
                return None
            if token.text in ("(", "["):
                self.pos = self.matches[self.pos] + 1
                continue
            self.pos += 1
        return None

    def _depth_zero(self, start: int, index: int) -> bool:
        i = start
        while i < index:
            if self.tokens[i].kind == TokenKind.OP and self.tokens[i].text in ("(", "[", "{"):
                closing = self.matches[i]
                if closing > index:
                    return False
                i = closing + 1
                continue
            i += 1
        return True

    # ------------------------------------------------------------------
    # statements
    # ------------------------------------------------------------------

    def _parse_block(self) -> ASTNode:
        open_index = self._expect_op("{")
        close_index = self.matches[open_index]
        block = ASTNode(node_type=ApexNodeType.BLOCK, location=self._location(open_index, close_index))
        while self.pos < close_index:
            block.children.append(self._parse_statement(close_index))
        self.pos = close_index + 1
        return block

    def _statement_end(self, limit: int) -> int:
        """Index of the terminating ';' at nesting depth zero (or ``limit``)."""
        i = self.pos
        while i < limit:
            token = self.tokens[i]
            if token.is_op(";"):
                return i
            if token.kind == TokenKind.OP and token.text in ("(", "[", "{"):
                i = self.matches[i] + 1
                continue
            i += 1
        return limit

    def _parse_parenthesized(self) -> tuple[int, int]:
        open_index = self._expect_op("(")
        close_index = self.matches[open_index]
        self.pos = close_index + 1
        return open_index + 1, close_index

    def _parse_statement(self, limit: int) -> ASTNode:
        start = self.pos
        token = self._peek()

        if token is None or self.pos >= limit:
            # Dangling loop or if header at the end of a block
            return ASTNode(node_type=ApexNodeType.STATEMENT)
        if token.is_op("{"):
            return self._parse_block()
        if token.is_op(";"):
            self.pos += 1
            return ASTNode(node_type=ApexNodeType.STATEMENT, location=self._location(start, start))
        if token.kind == TokenKind.IDENT:
            keyword = token.text.lower()
            if keyword == "for":
                return self._parse_for(start, limit)
            if keyword == "while":
                self.pos += 1
                cond_start, cond_end = self._parse_parenthesized()
                children = self._parse_expression(cond_start, cond_end)
                children.append(self._parse_statement(limit))
                return ASTNode(
                    node_type=ApexNodeType.WHILE_LOOP,
                    location=self._location(start, self.pos - 1),
                    children=children,
                )
            if keyword == "do":
                self.pos += 1
                body = self._parse_statement(limit)
                children = [body]
                if self._peek() and self._peek().is_word("while"):
                    self.pos += 1
                    cond_start, cond_end = self._parse_parenthesized()
                    children.extend(self._parse_expression(cond_start, cond_end))
                if self._peek() and self._peek().is_op(";"):
                    self.pos += 1
                return ASTNode(
                    node_type=ApexNodeType.DO_WHILE_LOOP,
                    location=self._location(start, self.pos - 1),
                    children=children,
                )
            if keyword == "if":
                self.pos += 1
                cond_start, cond_end = self._parse_parenthesized()
                children = self._parse_expression(cond_start, cond_end)
                children.append(self._parse_statement(limit))
                if self.pos < limit and self._peek().is_word("else"):
                    self.pos += 1
                    children.append(self._parse_statement(limit))
                return ASTNode(
                    node_type=ApexNodeType.STATEMENT,
                    name="if",
                    location=self._location(start, self.pos - 1),
                    children=children,
                )
            if keyword == "try":
                return self._parse_try(start, limit)
            if keyword == "return":
                end = self._statement_end(limit)
                node = ASTNode(
                    node_type=ApexNodeType.RETURN,
                    value=" ".join(t.text for t in self.tokens[start + 1:end]),
                    location=self._location(start, end),
                    children=self._parse_expression(start + 1, end),
                )
                self.pos = min(end + 1, limit)
                return node
            accessor = keyword in ("get", "set") and self._peek(1) is not None and self._peek(1).text in ("{", ";")
            if accessor or keyword in ("switch", "when") or self._is_headed_block(limit):
                return self._parse_headed_block(start, limit)

        return self._parse_simple_statement(start, limit)

    def _is_headed_block(self, limit: int) -> bool:
        """``else``-less constructs such as ``static { ... }`` inside statements."""
        i = self.pos
        while i < limit and self.tokens[i].kind == TokenKind.IDENT:
            i += 1
        return i > self.pos and i < limit and self.tokens[i].is_op("{") and (
            i == self.pos + 1 or self.tokens[self.pos].text.lower() in ("switch", "when")
        )

    def _parse_headed_block(self, start: int, limit: int) -> ASTNode:
        """``switch on x { ... }``, ``when A, B { ... }``, ``get { ... }``."""
        head_end = self.pos
        while head_end < limit and not self.tokens[head_end].is_op("{") and not self.tokens[head_end].is_op(";"):
            if self.tokens[head_end].text in ("(", "["):
                head_end = self.matches[head_end]
            head_end += 1
        children = self._parse_expression(self.pos + 1, head_end)
        self.pos = head_end
        if head_end < limit and self.tokens[head_end].is_op("{"):
            children.append(self._parse_block())
        elif head_end < limit:
            self.pos += 1
        return ASTNode(
            node_type=ApexNodeType.STATEMENT,
            name=self.tokens[start].text.lower(),
            location=self._location(start, self.pos - 1),
            children=children,
        )

    def _parse_for(self, start: int, limit: int) -> ASTNode:
        self.pos += 1
        header_start, header_end = self._parse_parenthesized()
        colon = next(
            (
                i for i in range(header_start, header_end)
                if self.tokens[i].is_op(":") and self._depth_zero(header_start, i)
            ),
            None,
        )
        node = ASTNode(node_type=ApexNodeType.FOR_LOOP)
        if colon is not None and colon > header_start and self.tokens[colon - 1].kind == TokenKind.IDENT:
            loop_variable = self.tokens[colon - 1].text
            node.attributes.update(
                {
                    "for_each": True,
                    "loop_variable": loop_variable,
                    "iterable": " ".join(t.text for t in self.tokens[colon + 1:header_end]),
                }
            )
            node.children.append(
                ASTNode(
                    node_type=ApexNodeType.VARIABLE_DECLARATION,
                    name=loop_variable,
                    location=self._location(header_start, header_end - 1),
                    attributes={
                        "type": " ".join(t.text for t in self.tokens[header_start:colon - 1]),
                        "for_each": True,
                    },
                    children=self._parse_expression(colon + 1, header_end),
                )
            )
        else:
            node.attributes["for_each"] = False
            node.children.append(
                ASTNode(
                    node_type=ApexNodeType.STATEMENT,
                    name="for_control",
                    location=self._location(header_start - 1, header_end),
                    children=self._parse_expression(header_start, header_end),
                )
            )
        node.children.append(self._parse_statement(limit))
        node.location = self._location(start, self.pos - 1)
        return node

    def _parse_try(self, start: int, limit: int) -> ASTNode:
        self.pos += 1
        children = [self._parse_block()]
        while self.pos < limit and self._peek().is_word("catch"):
            self.pos += 1
            if self._peek().is_op("("):
                self.pos = self.matches[self.pos] + 1
            children.append(self._parse_block())
        if self.pos < limit and self._peek().is_word("finally"):
            self.pos += 1
            children.append(self._parse_block())
        return ASTNode(
            node_type=ApexNodeType.STATEMENT,
            name="try",
            location=self._location(start, self.pos - 1),
            children=children,
        )

    def _parse_simple_statement(self, start: int, limit: int) -> ASTNode:
        end = self._statement_end(limit)
        self.pos = min(end + 1, limit) if end < limit else limit
        if end == start:
            # Stray token; consume it so the caller always advances.
            self.pos = start + 1
            return ASTNode(node_type=ApexNodeType.STATEMENT, location=self._location(start, start))

        location = self._location(start, min(end, len(self.tokens) - 1))
        first = start
        while first < end and self.tokens[first].is_word("final"):
            first += 1

        type_end = self._type_end(first, end)
        if (
            type_end is not None
            and type_end < end
            and self.tokens[type_end].kind == TokenKind.IDENT
            and (type_end + 1 == end or self.tokens[type_end + 1].text in ("=", ","))
        ):
            initializer_start = type_end + 2 if type_end + 1 < end else end
            return ASTNode(
                node_type=ApexNodeType.VARIABLE_DECLARATION,
                name=self.tokens[type_end].text,
                location=location,
                attributes={"type": " ".join(t.text for t in self.tokens[first:type_end])},
                children=self._parse_expression(initializer_start, end),
            )

        assignment = self._assignment_target(start, end)
        if assignment is not None:
            target, equals_index = assignment
            node_name = target[5:] if target.lower().startswith("this.") else target
            return ASTNode(
                node_type=ApexNodeType.ASSIGNMENT,
                name=node_name,
                location=location,
                attributes={"target": target, "member_access": target.lower().startswith("this.")},
                children=self._parse_expression(equals_index + 1, end),
            )

        return ASTNode(
            node_type=ApexNodeType.STATEMENT,
            location=location,
            children=self._parse_expression(start, end),
        )

    def _assignment_target(self, start: int, end: int) -> tuple[str, int] | None:
        i = start
        parts: list[str] = []
        while i < end and self.tokens[i].kind == TokenKind.IDENT:
            parts.append(self.tokens[i].text)
            if i + 1 < end and self.tokens[i + 1].is_op("."):
                i += 2
                continue
            i += 1
            break
        if parts and i < end and self.tokens[i].is_op("="):
            return ".".join(parts), i
        return None

    # ------------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------------

    def _parse_expression(self, start: int, end: int) -> list[ASTNode]:
        """Extract CALL and QUERY nodes from a token range, preserving nesting."""
        nodes: list[ASTNode] = []
        i = start
        while i < end:
            token = self.tokens[i]
            if token.kind == TokenKind.SOQL:
                nodes.append(self.soql.parse(token.text, self.unit_name, token.line))
                i += 1
                continue
            if (
                token.kind == TokenKind.IDENT
                and i + 1 < end
                and self.tokens[i + 1].is_op("(")
                and token.text.lower() not in NON_CALL_WORDS
            ):
                close = self.matches[i + 1]
                arguments = self._parse_expression(i + 2, close)
                qualifier, chain_start = self._qualifier(i, start)
                if chain_start > start and self.tokens[chain_start - 1].is_word("new"):
                    # Object construction, not a method call
                    nodes.extend(arguments)
                else:
                    nodes.append(
                        ASTNode(
                            node_type=ApexNodeType.CALL,
                            name=token.text,
                            value=" ".join(t.text for t in self.tokens[chain_start:close + 1]),
                            location=self._location(chain_start, close),
                            attributes={
                                "qualifier": qualifier,
                                "chained": chain_start > start and self.tokens[chain_start - 1].text in (")", "]"),
                            },
                            children=arguments,
                        )
                    )
                i = close + 1
                continue
            if token.kind == TokenKind.OP and token.text in ("(", "[", "{"):
                close = self.matches[i]
                nodes.extend(self._parse_expression(i + 1, close))
                i = close + 1
                continue
            i += 1
        return nodes

    def _qualifier(self, name_index: int, floor: int) -> tuple[str, int]:
        """Receiver chain before a call name: ``System.Schema`` for ``System.Schema.x()``."""
        parts: list[str] = []
        i = name_index
        while (
            i - 2 >= floor
            and self.tokens[i - 1].text in (".", "?.")
            and self.tokens[i - 2].kind == TokenKind.IDENT
        ):
            parts.insert(0, self.tokens[i - 2].text)
            i -= 2
        if i - 1 >= floor and self.tokens[i - 1].text in (".", "?."):
            # Receiver is an expression such as foo().bar()
            i -= 1
        return ".".join(parts), i
