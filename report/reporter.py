# report/reporter.py
from jinja2 import Template
import json
from typing import Optional

from pydantic import BaseModel

from .report_models import DiagnosticResult

TEXT_TEMPLATE = """\
=== DATABASE DIAGNOSTIC ===
Date: {{ generated_at }}
-------------------------------------------
{% macro tables(report) -%}
{% for name, t in report.per_table.items() -%}
{% if t.exists and t.valid %}   ✅ Table '{{ name }}': OK
{% elif t.error %}   ❌ Table '{{ name }}': error: {{ t.error }}
{% elif not t.exists %}   ❌ Table '{{ name }}': not found
{% else %}   ⚠️ Table '{{ name }}':{% if t.missing_columns %} missing columns: {{ t.missing_columns | join(', ') }};{% endif %}{% for m in t.type_mismatches %} {{ m.column }} expected {{ m.expected }} found {{ m.actual }};{% endfor %}{% for m in t.constraint_mismatches %} {{ m.column }} {{ m.attribute }} expected {{ m.expected }} found {{ m.actual }};{% endfor %}
{% endif -%}
{% endfor -%}
{%- endmacro %}
{% if result.validation.overall_valid -%}
✅ Database structure is correct
{% else -%}
❌ Problems found in the structure:
{% for e in result.initial_problems %}   - {{ e }}
{% endfor %}
Details per table:
{{ tables(result.validation) }}
{%- if result.repair %}
{% if result.repair.success -%}
✅ Repair completed: {{ result.repair.message }}
{% else -%}
❌ Error during repair: {{ result.repair.error }}
{% if result.repair.failure_reason %}   reason: {{ result.repair.failure_reason }}
{% endif %}{% if result.repair.failed_statement %}   statement: {{ result.repair.failed_statement }}
{% endif -%}
{% endif -%}
{% for i in result.repair.ignored %}   ⚠️ ignored {{ i.kind }}: {{ i.message }}
{% endfor -%}
{% if result.fixed -%}
✅ Structure corrected
{% else -%}
⚠️ Problems persist after the repair:
{% for e in result.remaining_problems %}   - {{ e }}
{% endfor -%}
{% endif -%}
{% else %}
Repair not attempted.
{% endif -%}
{% endif -%}
{% for q in result.query_checks -%}
{% if q.valid %}✅ Write columns for '{{ q.table }}' are valid
{% else %}❌ Write columns for '{{ q.table }}': {{ q.error }}
{% endif -%}
{% endfor -%}
=== DIAGNOSTIC FINISHED ===
"""


class ReportGenerator:
    def render_text(self, result: DiagnosticResult, generated_at: Optional[str] = None) -> str:
        tpl = Template(TEXT_TEMPLATE)
        return tpl.render(result=result, generated_at=generated_at or "")

    def to_json(self, report: BaseModel) -> str:
        return json.dumps(report.model_dump(mode="json"), default=str, indent=2)
