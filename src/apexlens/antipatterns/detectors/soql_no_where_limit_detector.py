"""
SOQL No WHERE / LIMIT Detector

Flags queries with neither a WHERE nor a LIMIT clause: they read the whole
table and fail with row-limit exceptions once data grows.

Clause presence is read from the query's clause children. Queries the SOQL
provider could not split fall back to a text search with sub-selects masked
out, so an inner query's clauses never count for the outer one.
"""

from typing import List, Tuple

from apexlens.antipatterns.detectors.base import BaseDetector, traverse
from apexlens.antipatterns.domain.enums import AntipatternType, Severity
from apexlens.antipatterns.domain.models import DetectedAntipattern, SeverityPolicy
from apexlens.antipatterns.utils.soql_text import has_limit_clause_text, has_where_clause_text
from apexlens.ast.domain.enums import ApexNodeType
from apexlens.ast.domain.models import ASTNode
from apexlens.ast.providers.soql_provider import query_clause


def clause_presence(query: ASTNode) -> Tuple[bool, bool]:
    """(has WHERE, has LIMIT) for the query itself, sub-selects excluded."""
    if query.attributes.get("structured"):
        return (
            query_clause(query, ApexNodeType.WHERE_CLAUSE) is not None,
            query_clause(query, ApexNodeType.LIMIT_CLAUSE) is not None,
        )
    text = query.attributes.get("raw_text") or query.value or ""
    return has_where_clause_text(text), has_limit_clause_text(text)


class SOQLNoWhereLimitDetector(BaseDetector):
    """Query-shape detector for unbounded SOQL."""

    default_severity_policy = SeverityPolicy(in_loop=Severity.MAJOR, baseline=Severity.MINOR)

    def get_antipattern_type(self) -> AntipatternType:
        return AntipatternType.SOQL_NO_WHERE_LIMIT

    def detect_ast(self, unit_name: str, source: str, lines: List[str], ast_root: ASTNode) -> List[DetectedAntipattern]:
        detections = []
        for node, context in traverse(ast_root):
            # Sub-selects are bounded by their parent query's rows
            if node.node_type != ApexNodeType.QUERY or node.attributes.get("nested"):
                continue

            has_where, has_limit = clause_presence(node)
            if has_where or has_limit:
                continue

            line = node.start_line
            detections.append(
                DetectedAntipattern(
                    unit_name=unit_name,
                    member_name=context.member_name,
                    line_number=line,
                    snippet_before=self.get_line(lines, line),
                    severity=self.severity_policy.for_loop_depth(context.loop_depth),
                )
            )
        return detections
