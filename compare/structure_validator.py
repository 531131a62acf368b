# compare/structure_validator.py
"""
Read-only comparison of the live database structure against a SchemaDescriptor.

`validate()` never raises for database failures: an introspection error is
recorded on the table it happened for and the pass moves on to the next table.
"""
import logging
from typing import Dict, List

from adapters.base import DatabaseAdapter
from adapters.errors import DatabaseError
from descriptor.models import SchemaDescriptor, TableSpec
from normalize.schema_normalizer import SchemaNormalizer
from report.report_models import ConstraintMismatch, TableReport, TypeMismatch, ValidationReport

logger = logging.getLogger(__name__)

_norm = SchemaNormalizer()


def validate(connection: DatabaseAdapter, descriptor: SchemaDescriptor) -> ValidationReport:
    """
    Compare every descriptor table with the live database.

    Returns a ValidationReport:
      overall_valid  -> every table exists and is valid
      per_table      -> {table: TableReport} in descriptor order
      errors         -> human-readable problems, in descriptor order
    """
    logger.info("Validating database structure (%d tables)...", len(descriptor.tables))
    per_table: Dict[str, TableReport] = {}
    errors: List[str] = []

    try:
        live_tables = set(connection.list_tables())
    except DatabaseError as e:
        logger.error("❌ Could not list tables: %s", e)
        for name in descriptor.table_names():
            per_table[name] = TableReport(exists=False, error=str(e))
            errors.append(f"error validating table '{name}': {e}")
        return ValidationReport(overall_valid=False, per_table=per_table, errors=errors)

    for spec in descriptor.specs():
        if spec.name not in live_tables:
            per_table[spec.name] = TableReport(exists=False)
            errors.append(f"table '{spec.name}' not found")
            continue
        report, table_errors = _validate_table(connection, spec)
        per_table[spec.name] = report
        errors.extend(table_errors)

    overall = all(r.exists and r.valid for r in per_table.values())
    if overall:
        logger.info("✅ Database structure is valid")
    else:
        for err in errors:
            logger.warning("⚠️ %s", err)
    return ValidationReport(overall_valid=overall, per_table=per_table, errors=errors)


def _validate_table(connection: DatabaseAdapter, spec: TableSpec):
    try:
        live = connection.describe(spec.name)
    except DatabaseError as e:
        return (
            TableReport(exists=True, valid=False, error=str(e)),
            [f"error validating table '{spec.name}': {e}"],
        )

    diff = _norm.diff_columns(spec.columns, live)
    raw_types = {c.field: c.raw_type for c in live}
    errors = []
    if diff["missing"]:
        errors.append(f"table '{spec.name}' is missing columns: {', '.join(diff['missing'])}")
    for m in diff["type_mismatches"]:
        errors.append(
            f"table '{spec.name}' column '{m['column']}' expected {m['expected']} "
            f"but found {raw_types.get(m['column'], m['actual'])}"
        )
    for m in diff["constraint_mismatches"]:
        errors.append(
            f"table '{spec.name}' column '{m['column']}' {m['attribute']} expected "
            f"{m['expected']} but found {m['actual']}"
        )

    report = TableReport(
        exists=True,
        missing_columns=diff["missing"],
        type_mismatches=[TypeMismatch(**m) for m in diff["type_mismatches"]],
        constraint_mismatches=[ConstraintMismatch(**m) for m in diff["constraint_mismatches"]],
        valid=not errors,
    )
    return report, errors
