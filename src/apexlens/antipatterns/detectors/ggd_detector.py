"""
Schema.getGlobalDescribe() Detector

getGlobalDescribe() loads the describe result of every sObject in the org.
Calls inside loops repeat that cost per iteration.
"""

from typing import List

from apexlens.antipatterns.detectors.base import BaseDetector, traverse
from apexlens.antipatterns.domain.enums import AntipatternType, Severity
from apexlens.antipatterns.domain.models import DetectedAntipattern, SeverityPolicy
from apexlens.ast.domain.enums import ApexNodeType
from apexlens.ast.domain.models import ASTNode

TARGET_METHOD = "getglobaldescribe"
TARGET_QUALIFIER = "schema"


class GGDDetector(BaseDetector):
    """Call-site detector for ``Schema.getGlobalDescribe()``."""

    default_severity_policy = SeverityPolicy(in_loop=Severity.CRITICAL, baseline=Severity.MAJOR)

    def get_antipattern_type(self) -> AntipatternType:
        return AntipatternType.GGD

    def detect_ast(self, unit_name: str, source: str, lines: List[str], ast_root: ASTNode) -> List[DetectedAntipattern]:
        detections = []
        for node, context in traverse(ast_root):
            if not self._is_target_call(node):
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

    @staticmethod
    def _is_target_call(node: ASTNode) -> bool:
        if node.node_type != ApexNodeType.CALL or not node.name:
            return False
        if node.name.lower() != TARGET_METHOD:
            return False
        # Apex identifiers are case-insensitive; "System.Schema" is also accepted
        qualifier = node.attributes.get("qualifier") or ""
        return qualifier.split(".")[-1].lower() == TARGET_QUALIFIER
