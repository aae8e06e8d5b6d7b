"""
Base Detector Class

Abstract base for all antipattern detectors, plus the traversal context the
tree-walking detectors thread through their visit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Tuple

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.domain.models import DetectedAntipattern, SeverityPolicy
from apexlens.ast.domain.enums import LOOP_NODE_TYPES, MEMBER_NODE_TYPES, ApexNodeType
from apexlens.ast.domain.models import ASTNode
from apexlens.ast.providers.apex_provider import ApexASTProvider
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TraversalContext:
    """
    Scope state at a node: enclosing member, loop nesting and, for direct
    children of a declaration or assignment, the variable being assigned.
    """

    member_name: Optional[str] = None
    loop_depth: int = 0
    assignment_target: Optional[str] = None

    @property
    def in_loop(self) -> bool:
        return self.loop_depth > 0

    def enter(self, node: ASTNode) -> "TraversalContext":
        """Context for the children of ``node``."""
        if node.node_type == ApexNodeType.CLASS:
            return TraversalContext()
        if node.node_type in MEMBER_NODE_TYPES:
            return TraversalContext(member_name=node.name)
        if node.node_type in LOOP_NODE_TYPES:
            return replace(self, loop_depth=self.loop_depth + 1, assignment_target=None)
        if node.node_type in (ApexNodeType.VARIABLE_DECLARATION, ApexNodeType.ASSIGNMENT):
            return replace(self, assignment_target=node.name)
        if self.assignment_target is None:
            return self
        return replace(self, assignment_target=None)


def traverse(node: ASTNode, context: TraversalContext = TraversalContext()) -> Iterator[Tuple[ASTNode, TraversalContext]]:
    """Pre-order walk yielding each node with the context it appears in."""
    yield node, context
    child_context = context.enter(node)
    for child in node.children:
        yield from traverse(child, child_context)


class BaseDetector(ABC):
    """
    Base class for antipattern detectors.

    Subclasses implement ``detect_ast``; ``detect`` owns parsing and the
    fail-open contract: a parse or detection failure is logged and yields no
    findings, so one detector never aborts a multi-detector scan.
    """

    default_severity_policy: SeverityPolicy

    def __init__(
        self,
        severity_policy: Optional[SeverityPolicy] = None,
        provider: Optional[ApexASTProvider] = None,
    ):
        self.severity_policy = severity_policy or self.default_severity_policy
        self.provider = provider or ApexASTProvider()

    @abstractmethod
    def get_antipattern_type(self) -> AntipatternType:
        """Antipattern type this detector reports."""
        pass

    @abstractmethod
    def detect_ast(self, unit_name: str, source: str, lines: List[str], ast_root: ASTNode) -> List[DetectedAntipattern]:
        """Detect antipatterns in a parsed compilation unit."""
        pass

    def detect(self, unit_name: str, source: str) -> List[DetectedAntipattern]:
        """Parse ``source`` and detect antipatterns; never raises."""
        try:
            result = self.provider.parse(source, unit_name)
            if not result.is_success():
                logger.warning(
                    "detector_parse_failed",
                    detector=type(self).__name__,
                    unit_name=unit_name,
                    errors=[error.message for error in result.errors],
                )
                return []
            detections = self.detect_ast(unit_name, source, source.splitlines(), result.ast_root)
        except Exception as e:
            logger.error(
                "detector_failed",
                detector=type(self).__name__,
                unit_name=unit_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        logger.debug(
            "detector_completed",
            detector=type(self).__name__,
            unit_name=unit_name,
            findings=len(detections),
        )
        return detections

    @staticmethod
    def get_line(lines: List[str], line_num: int) -> str:
        """Get a line from the source (1-indexed), stripped."""
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1].strip()
        return ""
