# repair/repair_engine.py
"""
Reconciles the live structure toward a SchemaDescriptor in two phases.

Phase A adds columns the descriptor expects but the live tables lack, one
ALTER TABLE per column; a failed addition is logged and skipped.

Phase B replays the canonical DDL script statement by statement. "Already
exists" errors are ignored; anything else stops the replay at that statement.
"""
import logging
from enum import Enum
from typing import List

from adapters.base import DatabaseAdapter
from adapters.errors import DatabaseError, SQLErrorKind
from descriptor.models import SchemaDescriptor
from normalize.schema_normalizer import SchemaNormalizer
from report.report_models import IgnoredError, RepairOutcome
from .ddl_script import is_database_level, is_structural, split_statements, summarize

logger = logging.getLogger(__name__)

_norm = SchemaNormalizer()

ALREADY_EXISTS_KINDS = {
    SQLErrorKind.DATABASE_EXISTS,
    SQLErrorKind.DUPLICATE_TABLE,
    SQLErrorKind.DUPLICATE_KEY_NAME,
    SQLErrorKind.DUPLICATE_COLUMN,
}

DATA_INCOMPATIBLE_KINDS = {
    SQLErrorKind.INVALID_NULL,
    SQLErrorKind.DATA_TRUNCATED,
    SQLErrorKind.DATA_TOO_LONG,
    SQLErrorKind.OUT_OF_RANGE,
    SQLErrorKind.DUPLICATE_ENTRY,
}

DATA_BLOCKS_MIGRATION = (
    "existing data blocks this migration; clean data or adjust the script manually"
)


class ErrorClass(str, Enum):
    IGNORABLE = "IGNORABLE"
    DATA_INCOMPATIBLE = "DATA_INCOMPATIBLE"
    FATAL = "FATAL"


def classify_error(error: DatabaseError, statement: str) -> ErrorClass:
    structural = is_structural(statement)
    if error.kind in ALREADY_EXISTS_KINDS:
        return ErrorClass.IGNORABLE
    if error.kind == SQLErrorKind.DUPLICATE_ENTRY and not structural:
        # seed rows that are already there
        return ErrorClass.IGNORABLE
    if structural and error.kind in DATA_INCOMPATIBLE_KINDS:
        return ErrorClass.DATA_INCOMPATIBLE
    return ErrorClass.FATAL


# -----------------------------
# Phase A: targeted column addition
# -----------------------------

def add_missing_columns(connection: DatabaseAdapter, descriptor: SchemaDescriptor) -> List[str]:
    """Return "<table>.<column>" for every column successfully added."""
    added: List[str] = []
    try:
        live_tables = set(connection.list_tables())
    except DatabaseError as e:
        logger.warning("⚠️ Skipping column addition, could not list tables: %s", e)
        return added

    for spec in descriptor.specs():
        if spec.name not in live_tables:
            continue
        try:
            live = connection.describe(spec.name)
        except DatabaseError as e:
            logger.warning("⚠️ Could not inspect table '%s', skipping: %s", spec.name, e)
            continue

        for col in _norm.missing_columns(spec.columns, live):
            ddl = f"ALTER TABLE {spec.name} ADD COLUMN {col.name} {_norm.ddl_type(col.expected_type)}"
            try:
                connection.query(ddl)
            except DatabaseError as e:
                logger.warning("⚠️ Could not add column %s.%s: %s", spec.name, col.name, e)
                continue
            logger.info("✅ Added column %s.%s", spec.name, col.name)
            added.append(f"{spec.name}.{col.name}")
    return added


# -----------------------------
# Phase B: full script replay
# -----------------------------

def replay_script(connection: DatabaseAdapter, ddl_script: str) -> RepairOutcome:
    """
    Execute the script statement by statement, skipping USE and CREATE DATABASE.

    Stops at the first error that is not an "already exists" error.
    """
    executed = 0
    ignored: List[IgnoredError] = []

    for statement in split_statements(ddl_script):
        if is_database_level(statement):
            logger.debug("Skipping %s", summarize(statement))
            continue

        executed += 1
        try:
            connection.query(statement)
        except DatabaseError as e:
            err_class = classify_error(e, statement)
            if err_class == ErrorClass.IGNORABLE:
                logger.warning("⚠️ Ignored (%s): %s", e.kind.value, summarize(statement))
                ignored.append(IgnoredError(statement=statement, kind=e.kind.value, message=e.message))
                continue

            failure_reason = None
            if err_class == ErrorClass.DATA_INCOMPATIBLE:
                failure_reason = f"{DATA_BLOCKS_MIGRATION} ({e.kind.value}: {e.message})"
                logger.error("❌ %s: %s", failure_reason, summarize(statement))
            else:
                logger.error("❌ Statement failed (%s): %s", e, summarize(statement))

            return RepairOutcome(
                success=False,
                message="script replay stopped at a failing statement",
                error=str(e),
                failure_reason=failure_reason,
                failed_statement=statement,
                statements_executed=executed,
                ignored=ignored,
            )

    return RepairOutcome(
        success=True,
        message=f"script replayed ({executed} statements, {len(ignored)} ignored)",
        statements_executed=executed,
        ignored=ignored,
    )


def repair(connection: DatabaseAdapter, descriptor: SchemaDescriptor, ddl_script: str) -> RepairOutcome:
    """Run Phase A then Phase B; columns_added comes from Phase A."""
    logger.info("Starting database structure repair...")
    columns_added = add_missing_columns(connection, descriptor)
    replay = replay_script(connection, ddl_script)

    if not replay.success:
        return replay.model_copy(update={"columns_added": columns_added})

    message = _summary(columns_added)
    logger.info("✅ Repair completed: %s", message)
    return replay.model_copy(update={"columns_added": columns_added, "message": message})


def _summary(columns_added: List[str]) -> str:
    if not columns_added:
        return "repair completed; no columns added"
    return f"repair completed; columns added: {', '.join(columns_added)}"

