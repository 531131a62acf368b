# report/report_models.py
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TypeMismatch(_Frozen):
    column: str
    expected: str
    actual: str


class ConstraintMismatch(_Frozen):
    column: str
    attribute: str  # "nullable" | "key"
    expected: str
    actual: str


class TableReport(_Frozen):
    exists: bool
    missing_columns: List[str] = Field(default_factory=list)
    type_mismatches: List[TypeMismatch] = Field(default_factory=list)
    constraint_mismatches: List[ConstraintMismatch] = Field(default_factory=list)
    valid: bool = False
    error: Optional[str] = None


class ValidationReport(_Frozen):
    overall_valid: bool
    per_table: Dict[str, TableReport]
    errors: List[str] = Field(default_factory=list)


class IgnoredError(_Frozen):
    statement: str
    kind: str
    message: str


class RepairOutcome(_Frozen):
    success: bool
    columns_added: List[str] = Field(default_factory=list)
    message: str = ""
    error: Optional[str] = None
    failure_reason: Optional[str] = None
    failed_statement: Optional[str] = None
    statements_executed: int = 0
    ignored: List[IgnoredError] = Field(default_factory=list)


class QueryCheck(_Frozen):
    valid: bool
    table: str
    invalid_columns: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class DiagnosticResult(_Frozen):
    valid: bool
    fixed: bool = False
    initial_problems: List[str] = Field(default_factory=list)
    remaining_problems: List[str] = Field(default_factory=list)
    validation: ValidationReport
    repair: Optional[RepairOutcome] = None
    revalidation: Optional[ValidationReport] = None
    query_checks: List[QueryCheck] = Field(default_factory=list)


class InitStatus(str, Enum):
    READY = "READY"
    REPAIRED = "REPAIRED"
    DEGRADED = "DEGRADED"


class InitializationResult(_Frozen):
    connection: Any = Field(repr=False, exclude=True)
    status: InitStatus
    validation: ValidationReport
    repair: Optional[RepairOutcome] = None
    revalidation: Optional[ValidationReport] = None

    @property
    def final_report(self) -> ValidationReport:
        return self.revalidation or self.validation

    def warnings(self) -> List[str]:
        return [] if self.status != InitStatus.DEGRADED else list(self.final_report.errors)
