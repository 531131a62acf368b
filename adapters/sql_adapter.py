# adapters/sql_adapter.py
import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import DBAPIError, NoSuchTableError, SQLAlchemyError

from descriptor.models import KeyKind
from .base import DatabaseAdapter, LiveColumnInfo, Params
from .errors import DatabaseError, SQLErrorKind, kind_for_mysql_code, kind_for_sqlite_message

logger = logging.getLogger(__name__)

MYSQL_KEY_FLAGS = {"PRI": KeyKind.PRIMARY, "UNI": KeyKind.UNIQUE, "MUL": KeyKind.INDEXED}


class SQLAdapter(DatabaseAdapter):
    """
    Connection provider over a pooled SQLAlchemy engine in AUTOCOMMIT mode
    (DDL commits implicitly on MySQL anyway). Every operation checks out its
    own connection, so one adapter can be shared by worker threads.

    MySQL is introspected with SHOW TABLES / DESCRIBE, SQLite with PRAGMA
    table_info so declared types come back verbatim; other dialects fall back
    to the SQLAlchemy inspector.
    """

    def __init__(self, url: Union[str, URL], echo: bool = False):
        try:
            self.engine = create_engine(url, echo=echo, isolation_level="AUTOCOMMIT")
            with self.engine.connect():
                pass
        except DBAPIError as e:
            err = self._wrap(e)
            if err.kind not in (SQLErrorKind.ACCESS_DENIED, SQLErrorKind.CONNECTION):
                err.kind = SQLErrorKind.CONNECTION
            raise err from e
        except SQLAlchemyError as e:
            raise DatabaseError(SQLErrorKind.CONNECTION, str(e)) from e
        self.dialect = self.engine.dialect.name

    @classmethod
    def from_config(cls, config, with_database: bool = True) -> "SQLAdapter":
        return cls(config.url(with_database=with_database), echo=config.echo)

    # -------------------------------
    # Statements
    # -------------------------------

    def query(self, sql: str, params: Params = None) -> List[Dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                if params is None:
                    # no driver-side interpolation, so '%' in DDL is left alone
                    result = conn.exec_driver_sql(sql, execution_options={"no_parameters": True})
                elif isinstance(params, dict):
                    result = conn.execute(text(sql), params)
                else:
                    result = conn.exec_driver_sql(sql, tuple(params))
                if result.returns_rows:
                    return [dict(r._mapping) for r in result]
                return []
        except DBAPIError as e:
            raise self._wrap(e, sql) from e

    # -------------------------------
    # Introspection
    # -------------------------------

    def list_tables(self) -> List[str]:
        if self.dialect == "mysql":
            rows = self.query("SHOW TABLES")
            return [str(next(iter(r.values()))) for r in rows]
        if self.dialect == "sqlite":
            rows = self.query(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
            )
            return [r["name"] for r in rows]
        try:
            return inspect(self.engine).get_table_names()
        except DBAPIError as e:
            raise self._wrap(e) from e

    def describe(self, table_name: str) -> List[LiveColumnInfo]:
        if self.dialect == "mysql":
            return self._describe_mysql(table_name)
        if self.dialect == "sqlite":
            return self._describe_sqlite(table_name)
        return self._describe_inspector(table_name)

    def _describe_mysql(self, table_name: str) -> List[LiveColumnInfo]:
        rows = self.query(f"DESCRIBE `{table_name}`")
        return [
            LiveColumnInfo(
                field=r["Field"],
                raw_type=_as_str(r["Type"]),
                nullable=str(r.get("Null", "YES")).upper() == "YES",
                key_flag=MYSQL_KEY_FLAGS.get(str(r.get("Key") or "").upper(), KeyKind.NONE),
            )
            for r in rows
        ]

    def _describe_sqlite(self, table_name: str) -> List[LiveColumnInfo]:
        rows = self.query(f'PRAGMA table_info("{table_name}")')
        if not rows:
            raise DatabaseError(SQLErrorKind.NO_SUCH_TABLE, f"no such table: {table_name}")

        keys: Dict[str, KeyKind] = {}
        for idx in self.query(f'PRAGMA index_list("{table_name}")'):
            cols = self.query(f'PRAGMA index_info("{idx["name"]}")')
            if not cols:
                continue
            if idx.get("unique") and len(cols) == 1:
                keys[cols[0]["name"]] = KeyKind.UNIQUE
            else:
                keys.setdefault(cols[0]["name"], KeyKind.INDEXED)

        out = []
        for r in rows:
            is_pk = bool(r["pk"])
            out.append(LiveColumnInfo(
                field=r["name"],
                raw_type=r["type"] or "",
                nullable=not (r["notnull"] or is_pk),
                key_flag=KeyKind.PRIMARY if is_pk else keys.get(r["name"], KeyKind.NONE),
            ))
        return out

    def _describe_inspector(self, table_name: str) -> List[LiveColumnInfo]:
        insp = inspect(self.engine)
        try:
            cols_meta = insp.get_columns(table_name)
            pk_cols = set(insp.get_pk_constraint(table_name).get("constrained_columns") or [])
            keys: Dict[str, KeyKind] = {}
            for uc in insp.get_unique_constraints(table_name):
                if len(uc["column_names"]) == 1:
                    keys[uc["column_names"][0]] = KeyKind.UNIQUE
            for ix in insp.get_indexes(table_name):
                names = [n for n in ix["column_names"] if n]
                if not names:
                    continue
                if ix.get("unique") and len(names) == 1:
                    keys[names[0]] = KeyKind.UNIQUE
                else:
                    keys.setdefault(names[0], KeyKind.INDEXED)
        except NoSuchTableError as e:
            raise DatabaseError(SQLErrorKind.NO_SUCH_TABLE, f"no such table: {table_name}") from e
        except DBAPIError as e:
            raise self._wrap(e) from e

        return [
            LiveColumnInfo(
                field=c["name"],
                raw_type=str(c["type"]),
                nullable=bool(c.get("nullable", True)) and c["name"] not in pk_cols,
                key_flag=KeyKind.PRIMARY if c["name"] in pk_cols else keys.get(c["name"], KeyKind.NONE),
            )
            for c in cols_meta
        ]

    # -------------------------------
    # Databases
    # -------------------------------

    def database_exists(self, name: str) -> bool:
        if self.dialect == "sqlite":
            # the file is the database and connecting created it
            return True
        rows = self.query(
            "SELECT SCHEMA_NAME FROM INFORMATION_SCHEMA.SCHEMATA WHERE SCHEMA_NAME = %s", [name]
        )
        return len(rows) > 0

    def create_database(self, name: str) -> None:
        if self.dialect == "sqlite":
            return
        self.query(f"CREATE DATABASE `{name}`")

    def close(self) -> None:
        self.engine.dispose()

    # -------------------------------
    # Error mapping
    # -------------------------------

    def _wrap(self, exc: DBAPIError, statement: Optional[str] = None) -> DatabaseError:
        orig = getattr(exc, "orig", None)
        message = str(orig) if orig is not None else str(exc)
        code = None
        args = getattr(orig, "args", ())
        if args and isinstance(args[0], int):
            code = args[0]
            if len(args) > 1:
                message = str(args[1])

        if code is not None:
            kind = kind_for_mysql_code(code)
        else:
            kind = kind_for_sqlite_message(message)
        return DatabaseError(kind, message, code=code, statement=statement)


def _as_str(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)
