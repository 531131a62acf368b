import re
from typing import Any, Dict, List, Optional

from adapters.base import LiveColumnInfo
from descriptor.models import ColumnSpec, KeyKind

BOOLEAN_TYPES = {"tinyint", "boolean", "bool"}

KEY_STRENGTH = {
    KeyKind.NONE: 0,
    KeyKind.INDEXED: 1,
    KeyKind.UNIQUE: 2,
    KeyKind.PRIMARY: 3,
}

DDL_TYPES = {
    "int": "INT",
    "varchar": "VARCHAR(255)",
    "text": "TEXT",
    "tinyint": "TINYINT(1)",
    "boolean": "TINYINT(1)",
    "bool": "TINYINT(1)",
}

_MODIFIERS = re.compile(r"\s+(unsigned|signed|zerofill)\b.*$")


class SchemaNormalizer:
    """
    Compares expected ColumnSpecs against introspected LiveColumnInfo.
    Detects:
      - missing columns
      - base type mismatch (prefix match, tinyint/boolean equivalence)
      - nullability drift
      - key weaker than required (PRIMARY satisfies UNIQUE, etc.)
    """

    # -----------------------------
    # Public API
    # -----------------------------

    def diff_columns(
        self, expected: List[ColumnSpec], live: List[LiveColumnInfo]
    ) -> Dict[str, Any]:
        """Diff one table; returns missing, type_mismatches and constraint_mismatches."""
        live_map = {c.field: c for c in live}
        missing: List[str] = []
        type_mismatches: List[Dict[str, str]] = []
        constraint_mismatches: List[Dict[str, str]] = []

        for spec in expected:
            col = live_map.get(spec.name)
            if col is None:
                missing.append(spec.name)
                continue
            if not self.types_compatible(spec.expected_type, col.raw_type):
                type_mismatches.append({
                    "column": spec.name,
                    "expected": spec.expected_type,
                    "actual": self.base_type(col.raw_type),
                })
            constraint_mismatches.extend(self._compare_constraints(spec, col))

        return {
            "missing": missing,
            "type_mismatches": type_mismatches,
            "constraint_mismatches": constraint_mismatches,
        }

    def missing_columns(self, expected: List[ColumnSpec], live: List[LiveColumnInfo]) -> List[ColumnSpec]:
        names = {c.field for c in live}
        return [spec for spec in expected if spec.name not in names]

    # -----------------------------
    # Type parsing
    # -----------------------------

    def base_type(self, raw: str) -> str:
        t = (raw or "").strip().lower()
        t = t.split("(", 1)[0].strip()
        return _MODIFIERS.sub("", t).strip()

    def types_compatible(self, expected: str, raw_actual: str) -> bool:
        expected = expected.strip().lower()
        actual = self.base_type(raw_actual)
        if expected in BOOLEAN_TYPES and actual in BOOLEAN_TYPES:
            return True
        return actual.startswith(expected)

    def ddl_type(self, semantic_type: str) -> str:
        t = semantic_type.strip().lower()
        return DDL_TYPES.get(t, t.upper())

    def key_satisfies(self, expected: Optional[KeyKind], actual: KeyKind) -> bool:
        if expected is None or expected == KeyKind.NONE:
            return True
        return KEY_STRENGTH[actual] >= KEY_STRENGTH[expected]

    # -----------------------------
    # Validation checks
    # -----------------------------

    def _compare_constraints(self, spec: ColumnSpec, col: LiveColumnInfo) -> List[Dict[str, str]]:
        out = []
        if spec.nullable is not None and spec.nullable != col.nullable:
            out.append(self._msg(spec.name, "nullable", str(spec.nullable).lower(), str(col.nullable).lower()))
        if not self.key_satisfies(spec.key_kind, col.key_flag):
            out.append(self._msg(spec.name, "key", spec.key_kind.value, col.key_flag.value))
        return out

    # -----------------------------
    # Helper
    # -----------------------------

    def _msg(self, column, attribute, expected, actual):
        return {"column": column, "attribute": attribute, "expected": expected, "actual": actual}
