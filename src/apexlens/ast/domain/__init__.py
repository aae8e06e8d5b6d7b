"""Universal syntax-tree model shared by providers and detectors."""

from apexlens.ast.domain.enums import ApexNodeType, ParseStatus
from apexlens.ast.domain.models import ASTNode, ParseError, ParseResult, SourceLocation

__all__ = ["ApexNodeType", "ParseStatus", "ASTNode", "ParseError", "ParseResult", "SourceLocation"]
