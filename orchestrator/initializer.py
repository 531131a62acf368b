# orchestrator/initializer.py
"""
Startup sequence for the catalog database:

  connect (server) -> ensure database -> connect (database) -> ensure tables
  -> validate -> repair + re-validate when invalid

Only a failed connection is fatal. Every schema problem that survives repair
is logged and the connection is still handed back (degraded start).

No lock is taken: two processes initializing the same database at once can
race on CREATE TABLE / ALTER TABLE. Callers that need exclusion pass `lock`.
"""
import logging
from contextlib import nullcontext
from typing import Callable, ContextManager, Optional

from adapters.base import DatabaseAdapter, adapter_factory
from adapters.errors import DatabaseError
from compare.structure_validator import validate
from descriptor.catalog import CATALOG_SCHEMA
from descriptor.models import SchemaDescriptor
from repair.ddl_script import load_ddl_script
from repair.repair_engine import repair, replay_script
from report.report_models import InitializationResult, InitStatus
from utils.config import DatabaseConfig

logger = logging.getLogger(__name__)

AdapterFactory = Callable[..., DatabaseAdapter]


class FatalInitializationError(RuntimeError):
    """No usable connection could be established."""


class _ScriptSource:
    """Loads the DDL script on first use; a load failure is logged once."""

    def __init__(self, path: str, text: Optional[str] = None):
        self.path = path
        self._text = text
        self._failed = False

    def get(self) -> Optional[str]:
        if self._text is None and not self._failed:
            try:
                self._text = load_ddl_script(self.path)
            except OSError as e:
                self._failed = True
                logger.error("❌ Could not read DDL script %s: %s", self.path, e)
        return self._text


def initialize(
    config: DatabaseConfig,
    descriptor: SchemaDescriptor = CATALOG_SCHEMA,
    ddl_script: Optional[str] = None,
    factory: AdapterFactory = adapter_factory,
    lock: Optional[Callable[[], ContextManager]] = None,
    auto_repair: bool = True,
) -> InitializationResult:
    """
    Return a ready (or degraded) connection for `config`.

    Raises FatalInitializationError when the server or database cannot be
    reached; everything else ends in an InitializationResult. With
    auto_repair=False an invalid schema is reported (DEGRADED) but not touched.
    """
    script = _ScriptSource(config.ddl_path, ddl_script)

    logger.info("Connecting to database server %s...", config.describe())
    server = _connect(factory, config, with_database=False)
    logger.info("✅ Server connection established")

    with (lock() if lock else nullcontext()):
        try:
            created = _ensure_database(server, config)
        finally:
            server.close()

        db = _connect(factory, config, with_database=True)
        logger.info("✅ Connected to '%s'", config.database)
        try:
            if created:
                _replay(db, script, reason=f"populating new database '{config.database}'")
            _ensure_tables(db, descriptor, script)
            result = _validate_and_repair(db, descriptor, script, auto_repair)
        except BaseException:
            db.close()
            raise

    logger.info("Database initialization finished (%s)", result.status.value)
    return result


def _connect(factory: AdapterFactory, config: DatabaseConfig, with_database: bool) -> DatabaseAdapter:
    try:
        return factory(config, with_database=with_database)
    except DatabaseError as e:
        target = config.database if with_database else "server"
        logger.error("❌ Could not connect to %s: %s", target, e)
        raise FatalInitializationError(f"cannot connect to {target}: {e}") from e


def _ensure_database(server: DatabaseAdapter, config: DatabaseConfig) -> bool:
    """Create the database when absent; True when it was created here."""
    try:
        if server.database_exists(config.database):
            logger.info("Database '%s' found", config.database)
            return False
        logger.info("Database '%s' not found. Creating...", config.database)
        server.create_database(config.database)
    except DatabaseError as e:
        logger.error("❌ Could not verify/create database '%s': %s", config.database, e)
        return False
    logger.info("✅ Database '%s' created", config.database)
    return True


def _ensure_tables(db: DatabaseAdapter, descriptor: SchemaDescriptor, script: _ScriptSource) -> None:
    try:
        live = set(db.list_tables())
    except DatabaseError as e:
        logger.error("❌ Could not list tables: %s", e)
        return
    missing = [name for name in descriptor.table_names() if name not in live]
    if missing:
        logger.warning("⚠️ Required tables missing: %s", ", ".join(missing))
        _replay(db, script, reason="creating missing tables")


def _replay(db: DatabaseAdapter, script: _ScriptSource, reason: str) -> None:
    text = script.get()
    if text is None:
        logger.warning("⚠️ Skipping script replay (%s): no DDL script available", reason)
        return
    logger.info("Running DDL script (%s)...", reason)
    outcome = replay_script(db, text)
    if outcome.success:
        logger.info("✅ %s", outcome.message)
    else:
        logger.error("❌ DDL script failed: %s", outcome.failure_reason or outcome.error)


def _validate_and_repair(
    db: DatabaseAdapter, descriptor: SchemaDescriptor, script: _ScriptSource, auto_repair: bool = True
) -> InitializationResult:
    validation = validate(db, descriptor)
    if validation.overall_valid:
        return InitializationResult(connection=db, status=InitStatus.READY, validation=validation)
    if not auto_repair:
        logger.warning("⚠️ Database structure has problems; automatic repair disabled")
        return InitializationResult(connection=db, status=InitStatus.DEGRADED, validation=validation)

    logger.warning("⚠️ Database structure has problems, attempting repair...")
    outcome = repair(db, descriptor, script.get() or "")
    if not outcome.success:
        logger.warning("⚠️ Repair did not complete: %s", outcome.failure_reason or outcome.error)

    revalidation = validate(db, descriptor)
    if revalidation.overall_valid:
        logger.info("✅ Database structure repaired (%s)", outcome.message)
        status = InitStatus.REPAIRED
    else:
        logger.warning("⚠️ Starting with a degraded schema; remaining problems:")
        for err in revalidation.errors:
            logger.warning("⚠️ - %s", err)
        status = InitStatus.DEGRADED

    return InitializationResult(
        connection=db,
        status=status,
        validation=validation,
        repair=outcome,
        revalidation=revalidation,
    )
