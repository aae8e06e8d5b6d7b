"""
SOQL Unused Fields Detector

Flags queries that project fields the code never reads. Every extra field
costs heap, CPU and database time on each execution.

A query is analysed only when its result lands in a local variable
(declaration, assignment or for-each loop variable). It is skipped when the
variable:
- is returned
- is a class member field
- is used as a complete value (passed on, listed, indexed as a whole)

A field counts as used when it is read through the variable (or a loop
variable iterating over it) or when a later query mentions both the variable
and the field, as in ``WHERE ParentId = :acc.Id``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from apexlens.antipatterns.detectors.base import BaseDetector, TraversalContext, traverse
from apexlens.antipatterns.domain.enums import AntipatternType, Severity
from apexlens.antipatterns.domain.models import DetectedAntipattern, SeverityPolicy
from apexlens.antipatterns.utils import field_usage
from apexlens.antipatterns.utils.soql_text import (
    exclude_system_fields,
    extract_fields_text,
    has_nested_queries,
)
from apexlens.ast.domain.enums import ApexNodeType
from apexlens.ast.domain.models import ASTNode
from apexlens.ast.providers.soql_provider import nested_queries


@dataclass
class _QuerySite:
    """A top-level query with the scope it was found in."""

    node: ASTNode
    context: TraversalContext

    @property
    def text(self) -> str:
        return self.node.value or ""

    @property
    def fields(self) -> List[str]:
        if self.node.attributes.get("structured"):
            return list(self.node.attributes.get("fields", []))
        return extract_fields_text(self.text)


class SOQLUnusedFieldsDetector(BaseDetector):
    """Field-usage detector for SOQL projections."""

    default_severity_policy = SeverityPolicy(in_loop=Severity.MAJOR, baseline=Severity.MINOR)

    def get_antipattern_type(self) -> AntipatternType:
        return AntipatternType.SOQL_UNUSED_FIELDS

    def detect_ast(self, unit_name: str, source: str, lines: List[str], ast_root: ASTNode) -> List[DetectedAntipattern]:
        sites = [
            _QuerySite(node, context)
            for node, context in traverse(ast_root)
            if node.node_type == ApexNodeType.QUERY and not node.attributes.get("nested")
        ]
        class_fields = self._class_field_names(ast_root)

        detections = []
        for site in sites:
            variable = site.context.assignment_target
            if self._should_skip(variable, site, source, lines, class_fields):
                continue

            fields = site.fields
            unused = self._find_unused_fields(site, variable, lines, sites)
            if not unused or len(unused) >= len(fields):
                continue

            detections.append(
                DetectedAntipattern(
                    unit_name=unit_name,
                    member_name=site.context.member_name,
                    line_number=site.node.start_line,
                    snippet_before=site.text,
                    severity=self.severity_policy.for_loop_depth(site.context.loop_depth),
                    type_metadata=self._build_metadata(site, variable, unused, sites),
                )
            )
        return detections

    @staticmethod
    def _class_field_names(ast_root: ASTNode) -> Set[str]:
        names: Set[str] = set()
        for node in ast_root.find_nodes(ApexNodeType.FIELD):
            for name in node.attributes.get("names") or [node.name]:
                if name:
                    names.add(name.lower())
        return names

    def _should_skip(
        self,
        variable: Optional[str],
        site: _QuerySite,
        source: str,
        lines: List[str],
        class_fields: Set[str],
    ) -> bool:
        if not variable:
            return True
        if field_usage.is_returned(variable, source):
            return True
        if variable.lower() in class_fields:
            return True
        # The query's last line is included: "acc = [...]; use(acc);" on one line
        code_from_query = "\n".join(lines[max(site.node.end_line - 1, 0):])
        return field_usage.uses_complete_results(variable, code_from_query, site.fields)

    @staticmethod
    def _later_queries(site: _QuerySite, sites: List[_QuerySite]) -> List[str]:
        return [other.text for other in sites if other.node.start_line > site.node.start_line]

    def _find_unused_fields(
        self,
        site: _QuerySite,
        variable: str,
        lines: List[str],
        sites: List[_QuerySite],
    ) -> List[str]:
        candidates = exclude_system_fields(site.fields)
        if not candidates:
            return []

        code_after = "\n".join(lines[site.node.end_line:])
        used = set(field_usage.find_direct_field_access(variable, code_after, candidates))
        used.update(
            field_usage.find_fields_used_in_later_queries(variable, self._later_queries(site, sites), candidates)
        )
        return [f for f in candidates if f not in used]

    def _build_metadata(
        self,
        site: _QuerySite,
        variable: str,
        unused: List[str],
        sites: List[_QuerySite],
    ) -> Dict[str, Any]:
        fields = site.fields
        return {
            "unusedFields": unused,
            "originalFields": fields,
            "assignedVariable": variable,
            "isInLoop": site.context.in_loop,
            "hasNestedQueries": bool(nested_queries(site.node)) or has_nested_queries(site.text),
            "usedInLaterQueries": field_usage.find_fields_used_in_later_queries(
                variable, self._later_queries(site, sites), fields
            ),
        }
