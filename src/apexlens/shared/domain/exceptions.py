"""
Domain exceptions for apexlens.

All application errors inherit from ApexLensError.
"""


class ApexLensError(Exception):
    """Base class for all apexlens exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(ApexLensError):
    """Raised when modules, resources or settings are composed inconsistently."""

    pass


class ApexParseError(ApexLensError):
    """Raised when Apex source cannot be turned into a syntax tree."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message, {"line": line, "column": column})
        self.line = line
        self.column = column
