import json

from adapters.base import LiveColumnInfo
from app.services.diagnostic import run_diagnostic
from report.reporter import ReportGenerator


class TestRunDiagnostic:
    def test_valid_database(self, healthy_db, descriptor, ddl_script):
        result = run_diagnostic(healthy_db, descriptor, ddl_script)

        assert result.valid is True
        assert result.repair is None
        assert [q.valid for q in result.query_checks] == [True]
        assert healthy_db.statements == []

    def test_report_only(self, healthy_db, descriptor, ddl_script):
        healthy_db.drop_column("catalogo", "recomendacion")
        result = run_diagnostic(healthy_db, descriptor, ddl_script, repair=False)

        assert result.valid is False
        assert result.fixed is False
        assert result.initial_problems == ["table 'catalogo' is missing columns: recomendacion"]
        assert result.query_checks == []
        assert healthy_db.statements == []

    def test_repair_fixes_missing_column(self, healthy_db, descriptor, ddl_script):
        healthy_db.drop_column("catalogo", "recomendacion")
        result = run_diagnostic(healthy_db, descriptor, ddl_script)

        assert result.valid is True
        assert result.fixed is True
        assert result.remaining_problems == []
        assert result.repair.columns_added == ["catalogo.recomendacion"]
        assert result.query_checks[0].valid is True

    def test_problems_persist(self, healthy_db, descriptor, ddl_script):
        healthy_db.replace_column("lenguaje", LiveColumnInfo(field="codigo", raw_type="int(11)"))
        result = run_diagnostic(healthy_db, descriptor, ddl_script)

        assert result.valid is False
        assert result.fixed is False
        assert result.remaining_problems == ["table 'lenguaje' column 'codigo' expected varchar but found int(11)"]
        assert result.query_checks == []


class TestReportGenerator:
    def test_render_valid(self, healthy_db, descriptor, ddl_script):
        text = ReportGenerator().render_text(run_diagnostic(healthy_db, descriptor, ddl_script), "2024-05-01T10:00:00")

        assert text.startswith("=== DATABASE DIAGNOSTIC ===")
        assert "Date: 2024-05-01T10:00:00" in text
        assert "✅ Database structure is correct" in text
        assert "✅ Write columns for 'catalogo' are valid" in text
        assert text.rstrip().endswith("=== DIAGNOSTIC FINISHED ===")

    def test_render_repaired(self, healthy_db, descriptor, ddl_script):
        healthy_db.drop_column("catalogo", "recomendacion")
        text = ReportGenerator().render_text(run_diagnostic(healthy_db, descriptor, ddl_script))

        assert "❌ Problems found in the structure:" in text
        assert "missing columns: recomendacion" in text
        assert "✅ Repair completed: repair completed; columns added: catalogo.recomendacion" in text
        assert "✅ Structure corrected" in text

    def test_render_not_repaired(self, healthy_db, descriptor):
        del healthy_db.tables["capitulo"]
        text = ReportGenerator().render_text(run_diagnostic(healthy_db, descriptor, "", repair=False))

        assert "❌ Table 'capitulo': not found" in text
        assert "Repair not attempted." in text

    def test_json_output(self, healthy_db, descriptor, ddl_script):
        payload = json.loads(ReportGenerator().to_json(run_diagnostic(healthy_db, descriptor, ddl_script)))
        assert payload["valid"] is True
        assert set(payload["validation"]["per_table"]) == {"catalogo", "temporada", "capitulo", "lenguaje"}
