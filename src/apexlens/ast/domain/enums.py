"""AST enums."""

from enum import Enum


class ApexNodeType(Enum):
    """Node kinds produced by the Apex and SOQL providers."""

    COMPILATION_UNIT = "compilation_unit"
    CLASS = "class"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    FIELD = "field"
    BLOCK = "block"
    STATEMENT = "statement"
    FOR_LOOP = "for_loop"
    WHILE_LOOP = "while_loop"
    DO_WHILE_LOOP = "do_while_loop"
    VARIABLE_DECLARATION = "variable_declaration"
    ASSIGNMENT = "assignment"
    RETURN = "return"
    CALL = "call"
    QUERY = "query"

    # SOQL clauses
    SELECT_CLAUSE = "select_clause"
    FROM_CLAUSE = "from_clause"
    USING_SCOPE_CLAUSE = "using_scope_clause"
    WHERE_CLAUSE = "where_clause"
    WITH_CLAUSE = "with_clause"
    GROUP_BY_CLAUSE = "group_by_clause"
    HAVING_CLAUSE = "having_clause"
    ORDER_BY_CLAUSE = "order_by_clause"
    LIMIT_CLAUSE = "limit_clause"
    OFFSET_CLAUSE = "offset_clause"
    FOR_CLAUSE = "for_clause"
    UPDATE_CLAUSE = "update_clause"
    ALL_ROWS_CLAUSE = "all_rows_clause"


LOOP_NODE_TYPES: frozenset = frozenset(
    {ApexNodeType.FOR_LOOP, ApexNodeType.WHILE_LOOP, ApexNodeType.DO_WHILE_LOOP}
)

MEMBER_NODE_TYPES: frozenset = frozenset({ApexNodeType.METHOD, ApexNodeType.CONSTRUCTOR})


class ParseStatus(Enum):
    """Parse operation status."""

    SUCCESS = "success"
    FAILED = "failed"
