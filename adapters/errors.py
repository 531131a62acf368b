# adapters/errors.py
import re
from enum import Enum
from typing import Optional


class SQLErrorKind(str, Enum):
    """Machine-readable error classes every adapter must report."""

    CONNECTION = "CONNECTION"
    ACCESS_DENIED = "ACCESS_DENIED"
    DATABASE_EXISTS = "DATABASE_EXISTS"
    DUPLICATE_TABLE = "DUPLICATE_TABLE"
    DUPLICATE_KEY_NAME = "DUPLICATE_KEY_NAME"
    DUPLICATE_COLUMN = "DUPLICATE_COLUMN"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    BAD_FIELD = "BAD_FIELD"
    NO_SUCH_TABLE = "NO_SUCH_TABLE"
    DATA_TRUNCATED = "DATA_TRUNCATED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    DATA_TOO_LONG = "DATA_TOO_LONG"
    INVALID_NULL = "INVALID_NULL"
    SYNTAX = "SYNTAX"
    UNKNOWN = "UNKNOWN"


class DatabaseError(Exception):
    """Structured failure raised by adapters for any driver error."""

    def __init__(
        self,
        kind: SQLErrorKind,
        message: str,
        code: Optional[int] = None,
        statement: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        self.statement = statement

    def __str__(self) -> str:
        if self.code is not None:
            return f"[{self.kind.value} {self.code}] {self.message}"
        return f"[{self.kind.value}] {self.message}"


# MySQL server / client error numbers
MYSQL_ERROR_KINDS = {
    1007: SQLErrorKind.DATABASE_EXISTS,
    1050: SQLErrorKind.DUPLICATE_TABLE,
    1060: SQLErrorKind.DUPLICATE_COLUMN,
    1061: SQLErrorKind.DUPLICATE_KEY_NAME,
    1062: SQLErrorKind.DUPLICATE_ENTRY,
    1054: SQLErrorKind.BAD_FIELD,
    1146: SQLErrorKind.NO_SUCH_TABLE,
    1265: SQLErrorKind.DATA_TRUNCATED,
    1264: SQLErrorKind.OUT_OF_RANGE,
    1406: SQLErrorKind.DATA_TOO_LONG,
    1048: SQLErrorKind.INVALID_NULL,
    1138: SQLErrorKind.INVALID_NULL,
    1263: SQLErrorKind.INVALID_NULL,
    1064: SQLErrorKind.SYNTAX,
    1044: SQLErrorKind.ACCESS_DENIED,
    1045: SQLErrorKind.ACCESS_DENIED,
    1142: SQLErrorKind.ACCESS_DENIED,
    2002: SQLErrorKind.CONNECTION,
    2003: SQLErrorKind.CONNECTION,
    2005: SQLErrorKind.CONNECTION,
    2006: SQLErrorKind.CONNECTION,
    2013: SQLErrorKind.CONNECTION,
}

# SQLite reports these conditions with a generic code, so match the message shape.
SQLITE_MESSAGE_KINDS = [
    (re.compile(r"table .+ already exists", re.I), SQLErrorKind.DUPLICATE_TABLE),
    (re.compile(r"index .+ already exists", re.I), SQLErrorKind.DUPLICATE_KEY_NAME),
    (re.compile(r"duplicate column name", re.I), SQLErrorKind.DUPLICATE_COLUMN),
    (re.compile(r"UNIQUE constraint failed", re.I), SQLErrorKind.DUPLICATE_ENTRY),
    (re.compile(r"NOT NULL constraint failed", re.I), SQLErrorKind.INVALID_NULL),
    (re.compile(r"no such table", re.I), SQLErrorKind.NO_SUCH_TABLE),
    (re.compile(r"no such column|has no column named", re.I), SQLErrorKind.BAD_FIELD),
    (re.compile(r"syntax error|incomplete input", re.I), SQLErrorKind.SYNTAX),
    (re.compile(r"unable to open database", re.I), SQLErrorKind.CONNECTION),
]


def kind_for_mysql_code(code: Optional[int]) -> SQLErrorKind:
    if code is None:
        return SQLErrorKind.UNKNOWN
    return MYSQL_ERROR_KINDS.get(code, SQLErrorKind.UNKNOWN)


def kind_for_sqlite_message(message: str) -> SQLErrorKind:
    for pattern, kind in SQLITE_MESSAGE_KINDS:
        if pattern.search(message):
            return kind
    return SQLErrorKind.UNKNOWN
