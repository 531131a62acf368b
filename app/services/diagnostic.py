import logging
from typing import List

from adapters.base import DatabaseAdapter
from compare.query_checker import check_write_columns
from compare.structure_validator import validate
from descriptor.catalog import CATALOG_WRITE_COLUMNS
from descriptor.models import SchemaDescriptor
from report.report_models import DiagnosticResult, QueryCheck
from repair.repair_engine import repair as run_repair

logger = logging.getLogger(__name__)


def run_diagnostic(
    connection: DatabaseAdapter,
    descriptor: SchemaDescriptor,
    ddl_script: str,
    repair: bool = True,
) -> DiagnosticResult:
    """Validate, optionally repair and re-validate; then check the catalog write columns."""
    logger.info("=== Starting database diagnostic ===")
    validation = validate(connection, descriptor)

    if validation.overall_valid:
        logger.info("✅ Database structure is correct")
        return DiagnosticResult(valid=True, validation=validation, query_checks=_query_checks(connection, descriptor))

    if not repair:
        logger.info("Repair skipped")
        return DiagnosticResult(
            valid=False,
            initial_problems=validation.errors,
            remaining_problems=validation.errors,
            validation=validation,
        )

    outcome = run_repair(connection, descriptor, ddl_script)
    if not outcome.success:
        logger.error("❌ Error during repair: %s", outcome.failure_reason or outcome.error)

    revalidation = validate(connection, descriptor)
    if revalidation.overall_valid:
        logger.info("✅ All problems have been resolved")
    else:
        logger.warning("⚠️ Some problems persist after the repair")

    return DiagnosticResult(
        valid=revalidation.overall_valid,
        fixed=revalidation.overall_valid,
        initial_problems=validation.errors,
        remaining_problems=revalidation.errors,
        validation=validation,
        repair=outcome,
        revalidation=revalidation,
        query_checks=_query_checks(connection, descriptor) if revalidation.overall_valid else [],
    )


def _query_checks(connection: DatabaseAdapter, descriptor: SchemaDescriptor) -> List[QueryCheck]:
    if "catalogo" not in descriptor.tables:
        return []
    check = check_write_columns(connection, "catalogo", CATALOG_WRITE_COLUMNS)
    if check.valid:
        logger.info("✅ Catalog insert/update columns are valid")
    else:
        logger.error("❌ Catalog insert/update columns: %s", check.error)
    return [check]
