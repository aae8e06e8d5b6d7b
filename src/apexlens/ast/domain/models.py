"""
AST domain models.

Universal tree representation produced by the Apex and SOQL providers.
Detectors only rely on the node kinds they visit explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from apexlens.ast.domain.enums import ApexNodeType, ParseStatus


@dataclass
class SourceLocation:
    """
    Source code location information.

    Lines are 1-indexed, columns 0-indexed.
    """

    file_path: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class ASTNode:
    """
    Universal AST node representation.

    ``attributes`` holds node-kind specific data, e.g. ``qualifier`` on CALL
    nodes or ``structured`` on QUERY nodes.
    """

    node_type: ApexNodeType
    name: str | None = None
    value: Any | None = None
    location: SourceLocation | None = None
    children: list[ASTNode] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def start_line(self) -> int:
        return self.location.start_line if self.location else 0

    @property
    def end_line(self) -> int:
        return self.location.end_line if self.location else self.start_line

    def walk(self) -> Iterator[ASTNode]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_nodes(self, node_type: ApexNodeType) -> list[ASTNode]:
        """
        Find all nodes of a specific type (recursive).

        Args:
            node_type: Type of nodes to find

        Returns:
            List of matching nodes
        """
        return [node for node in self.walk() if node.node_type == node_type]

    def child_of_type(self, node_type: ApexNodeType) -> ASTNode | None:
        """Return the first direct child of the given type."""
        for child in self.children:
            if child.node_type == node_type:
                return child
        return None


@dataclass
class ParseError:
    """Parse error information."""

    message: str
    location: SourceLocation | None = None


@dataclass
class ParseResult:
    """Result of a parsing operation."""

    status: ParseStatus
    provider_name: str
    ast_root: ASTNode | None = None
    errors: list[ParseError] = field(default_factory=list)
    parse_time_ms: float = 0.0
    unit_name: str | None = None

    def is_success(self) -> bool:
        """Check if parsing was successful."""
        return self.status == ParseStatus.SUCCESS and self.ast_root is not None

    def has_errors(self) -> bool:
        """Check if there are any errors."""
        return len(self.errors) > 0
