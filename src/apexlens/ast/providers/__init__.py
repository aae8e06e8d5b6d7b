"""
AST providers.

- ApexASTProvider: Apex classes, triggers and anonymous blocks
- SOQLASTProvider: clause structure of inline SOQL
"""

from apexlens.ast.providers.apex_provider import ApexASTProvider
from apexlens.ast.providers.soql_provider import SOQLASTProvider

__all__ = ["ApexASTProvider", "SOQLASTProvider"]
