import pytest

from adapters.base import LiveColumnInfo
from adapters.errors import DatabaseError, SQLErrorKind
from compare.structure_validator import validate
from repair.repair_engine import (
    DATA_BLOCKS_MIGRATION,
    ErrorClass,
    add_missing_columns,
    classify_error,
    repair,
    replay_script,
)
from fakes import FakeAdapter, healthy_tables


class TestClassifyError:
    @pytest.mark.parametrize("kind", [
        SQLErrorKind.DATABASE_EXISTS,
        SQLErrorKind.DUPLICATE_TABLE,
        SQLErrorKind.DUPLICATE_KEY_NAME,
        SQLErrorKind.DUPLICATE_COLUMN,
    ])
    def test_already_exists_is_ignorable(self, kind):
        err = DatabaseError(kind, "exists")
        assert classify_error(err, "CREATE INDEX idx ON t (a)") == ErrorClass.IGNORABLE

    def test_duplicate_entry_on_seed_insert_is_ignorable(self):
        err = DatabaseError(SQLErrorKind.DUPLICATE_ENTRY, "Duplicate entry '1' for key 'PRIMARY'")
        assert classify_error(err, "INSERT INTO catalogo (id) VALUES (1)") == ErrorClass.IGNORABLE

    def test_duplicate_entry_on_unique_index_is_data_incompatible(self):
        err = DatabaseError(SQLErrorKind.DUPLICATE_ENTRY, "Duplicate entry 'x' for key 'uq'")
        assert classify_error(err, "CREATE UNIQUE INDEX uq ON catalogo (nombre)") == ErrorClass.DATA_INCOMPATIBLE

    @pytest.mark.parametrize("kind", [
        SQLErrorKind.INVALID_NULL,
        SQLErrorKind.DATA_TRUNCATED,
        SQLErrorKind.DATA_TOO_LONG,
        SQLErrorKind.OUT_OF_RANGE,
    ])
    def test_structural_data_errors_are_data_incompatible(self, kind):
        err = DatabaseError(kind, "bad data")
        assert classify_error(err, "ALTER TABLE catalogo MODIFY nombre VARCHAR(10)") == ErrorClass.DATA_INCOMPATIBLE

    def test_everything_else_is_fatal(self):
        assert classify_error(DatabaseError(SQLErrorKind.SYNTAX, "syntax"), "CREATE TABLE x") == ErrorClass.FATAL
        assert classify_error(DatabaseError(SQLErrorKind.UNKNOWN, "?"), "ALTER TABLE x ADD y INT") == ErrorClass.FATAL


class TestAddMissingColumns:
    def test_adds_missing_column_with_ddl_type(self, healthy_db, descriptor):
        healthy_db.drop_column("catalogo", "recomendacion")
        added = add_missing_columns(healthy_db, descriptor)

        assert added == ["catalogo.recomendacion"]
        assert healthy_db.statements == ["ALTER TABLE catalogo ADD COLUMN recomendacion TINYINT(1)"]

    def test_nothing_to_add(self, healthy_db, descriptor):
        assert add_missing_columns(healthy_db, descriptor) == []
        assert healthy_db.statements == []

    def test_absent_tables_are_left_to_the_script(self, healthy_db, descriptor):
        del healthy_db.tables["lenguaje"]
        assert add_missing_columns(healthy_db, descriptor) == []

    def test_failed_addition_is_skipped(self, healthy_db, descriptor):
        healthy_db.drop_column("catalogo", "trailer")
        healthy_db.drop_column("lenguaje", "ruta")
        healthy_db.fail_on("ADD COLUMN trailer", SQLErrorKind.ACCESS_DENIED, "denied")

        assert add_missing_columns(healthy_db, descriptor) == ["lenguaje.ruta"]

    def test_list_failure_skips_phase(self, healthy_db, descriptor):
        healthy_db.list_error = DatabaseError(SQLErrorKind.CONNECTION, "gone")
        assert add_missing_columns(healthy_db, descriptor) == []


class TestReplayScript:
    def test_database_level_statements_are_not_sent(self, healthy_db, ddl_script):
        outcome = replay_script(healthy_db, ddl_script)
        assert outcome.success is True
        assert not any(s.upper().startswith(("USE", "CREATE DATABASE")) for s in healthy_db.statements)
        assert outcome.statements_executed == len(healthy_db.statements) == 5

    def test_already_exists_errors_are_ignored(self, healthy_db, ddl_script):
        outcome = replay_script(healthy_db, ddl_script)
        assert [i.kind for i in outcome.ignored] == ["DUPLICATE_KEY_NAME"]
        assert outcome.message == "script replayed (5 statements, 1 ignored)"

    def test_data_incompatible_halts_replay(self):
        db = FakeAdapter(tables=healthy_tables())
        script = (
            "CREATE TABLE IF NOT EXISTS catalogo (id INT);\n"
            "ALTER TABLE catalogo MODIFY nombre VARCHAR(255) NOT NULL;\n"
            "CREATE TABLE IF NOT EXISTS lenguaje (id INT);\n"
        )
        db.fail_on("MODIFY nombre", SQLErrorKind.INVALID_NULL, "Invalid use of NULL value")
        outcome = replay_script(db, script)

        assert outcome.success is False
        assert outcome.failure_reason.startswith(DATA_BLOCKS_MIGRATION)
        assert "INVALID_NULL" in outcome.failure_reason
        assert outcome.failed_statement == "ALTER TABLE catalogo MODIFY nombre VARCHAR(255) NOT NULL"
        assert outcome.statements_executed == 2
        assert len(db.statements) == 2

    def test_fatal_error_halts_without_data_reason(self, healthy_db):
        healthy_db.fail_on("BROKEN", SQLErrorKind.SYNTAX, "You have an error in your SQL syntax")
        outcome = replay_script(healthy_db, "SELECT 1; BROKEN STATEMENT; SELECT 2;")

        assert outcome.success is False
        assert outcome.failure_reason is None
        assert "SQL syntax" in outcome.error
        assert healthy_db.statements == ["SELECT 1", "BROKEN STATEMENT"]

    def test_duplicate_seed_rows_are_ignored(self, healthy_db):
        healthy_db.fail_on("INSERT INTO catalogo", SQLErrorKind.DUPLICATE_ENTRY, "Duplicate entry '1'")
        outcome = replay_script(healthy_db, "INSERT INTO catalogo (id, nombre) VALUES (1, 'a');")
        assert outcome.success is True
        assert outcome.ignored[0].kind == "DUPLICATE_ENTRY"

    def test_empty_script(self, healthy_db):
        outcome = replay_script(healthy_db, "")
        assert outcome.success is True
        assert outcome.statements_executed == 0


class TestRepair:
    def test_missing_column_converges(self, healthy_db, descriptor, ddl_script):
        healthy_db.drop_column("catalogo", "recomendacion")
        assert validate(healthy_db, descriptor).per_table["catalogo"].missing_columns == ["recomendacion"]

        outcome = repair(healthy_db, descriptor, ddl_script)

        assert outcome.success is True
        assert outcome.columns_added == ["catalogo.recomendacion"]
        assert healthy_db.statements[0] == "ALTER TABLE catalogo ADD COLUMN recomendacion TINYINT(1)"
        assert outcome.message == "repair completed; columns added: catalogo.recomendacion"
        assert validate(healthy_db, descriptor).overall_valid is True

    def test_valid_schema_adds_nothing(self, healthy_db, descriptor, ddl_script):
        outcome = repair(healthy_db, descriptor, ddl_script)
        assert outcome.success is True
        assert outcome.columns_added == []
        assert outcome.message == "repair completed; no columns added"
        assert validate(healthy_db, descriptor).overall_valid is True

    def test_missing_table_recreated_from_script(self, healthy_db, descriptor, ddl_script):
        del healthy_db.tables["capitulo"]
        outcome = repair(healthy_db, descriptor, ddl_script)
        assert outcome.success is True
        assert validate(healthy_db, descriptor).overall_valid is True

    def test_type_mismatch_is_not_rewritten(self, healthy_db, descriptor, ddl_script):
        healthy_db.replace_column("catalogo", LiveColumnInfo(field="nombre", raw_type="text"))
        outcome = repair(healthy_db, descriptor, ddl_script)

        assert outcome.success is True
        assert outcome.columns_added == []
        assert validate(healthy_db, descriptor).per_table["catalogo"].type_mismatches

    def test_columns_added_survive_replay_failure(self, healthy_db, descriptor):
        healthy_db.drop_column("catalogo", "nsfw")
        healthy_db.fail_on("BROKEN", SQLErrorKind.SYNTAX, "syntax")
        outcome = repair(healthy_db, descriptor, "BROKEN;")

        assert outcome.success is False
        assert outcome.columns_added == ["catalogo.nsfw"]
