# compare/query_checker.py
"""
Write-column checks for the catalog handlers.

`check_write_columns` runs in the diagnostic cycle. `execute_query` is library
surface for handlers that write to the catalog tables; nothing in this
repository calls it yet.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from adapters.base import DatabaseAdapter, Params
from adapters.errors import DatabaseError, SQLErrorKind
from report.report_models import QueryCheck

logger = logging.getLogger(__name__)

SUGGESTIONS = {
    SQLErrorKind.BAD_FIELD: "check the column names used by the query exist in the table",
    SQLErrorKind.NO_SUCH_TABLE: "check the table name and that the table exists in the database",
    SQLErrorKind.DUPLICATE_ENTRY: "a row with the same primary key or unique index already exists",
}


class QueryResult(BaseModel):
    success: bool
    rows: List[Dict[str, Any]] = []
    error: Optional[str] = None
    kind: Optional[str] = None
    suggestion: Optional[str] = None


def check_write_columns(connection: DatabaseAdapter, table: str, columns: Sequence[str]) -> QueryCheck:
    """Report which of `columns` do not exist on the live `table`."""
    try:
        live = {c.field for c in connection.describe(table)}
    except DatabaseError as e:
        return QueryCheck(valid=False, table=table, error=f"could not inspect table '{table}': {e}")

    invalid = [c for c in columns if c not in live]
    if invalid:
        return QueryCheck(
            valid=False,
            table=table,
            invalid_columns=invalid,
            error=f"columns not found in table {table}: {', '.join(invalid)}",
        )
    return QueryCheck(valid=True, table=table)


def execute_query(
    connection: DatabaseAdapter,
    sql: str,
    params: Params = None,
    table: Optional[str] = None,
    columns: Optional[Sequence[str]] = None,
) -> QueryResult:
    """
    Run a query, optionally checking the written columns first.

    Failures come back as a QueryResult with the error kind and, for the
    common cases, a suggestion for the operator.
    """
    if table and columns:
        check = check_write_columns(connection, table, columns)
        if not check.valid:
            logger.error("SQL validation error: %s", check.error)
            return QueryResult(success=False, error=check.error, kind=SQLErrorKind.BAD_FIELD.value,
                               suggestion=SUGGESTIONS[SQLErrorKind.BAD_FIELD])

    try:
        rows = connection.query(sql, params)
    except DatabaseError as e:
        logger.error("Error executing SQL query: %s", e)
        return QueryResult(
            success=False,
            error=e.message,
            kind=e.kind.value,
            suggestion=SUGGESTIONS.get(e.kind),
        )
    return QueryResult(success=True, rows=rows)
