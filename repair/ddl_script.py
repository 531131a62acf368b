# repair/ddl_script.py
import re
from typing import List

# USE and CREATE DATABASE target the server, not the connected database
_DATABASE_LEVEL = re.compile(r"^\s*(USE\s+\S+|CREATE\s+(DATABASE|SCHEMA)\b)", re.I)
_STRUCTURAL = re.compile(r"^\s*(ALTER\s+TABLE|CREATE\s+(UNIQUE\s+)?INDEX)\b", re.I)


def load_ddl_script(path: str, encoding: str = "utf-8") -> str:
    with open(path, "r", encoding=encoding) as f:
        return f.read()


def split_statements(script: str) -> List[str]:
    """
    Split a SQL script on ';' outside quotes and comments.

    Comment text is dropped; fragments that are blank once comments are gone
    are skipped.
    """
    statements: List[str] = []
    buf: List[str] = []
    i, n = 0, len(script)
    quote = None

    while i < n:
        ch = script[i]
        nxt = script[i + 1] if i + 1 < n else ""

        if quote:
            buf.append(ch)
            if ch == "\\" and quote != "`" and nxt:
                buf.append(nxt)
                i += 2
                continue
            if ch == quote:
                if nxt == quote:
                    buf.append(nxt)
                    i += 2
                    continue
                quote = None
            i += 1
            continue

        if ch in ("'", '"', "`"):
            quote = ch
            buf.append(ch)
        elif (ch == "-" and nxt == "-") or ch == "#":
            end = script.find("\n", i)
            i = n if end == -1 else end
            continue
        elif ch == "/" and nxt == "*":
            end = script.find("*/", i + 2)
            i = n if end == -1 else end + 2
            buf.append(" ")
            continue
        elif ch == ";":
            _flush(buf, statements)
            buf = []
        else:
            buf.append(ch)
        i += 1

    _flush(buf, statements)
    return statements


def _flush(buf: List[str], statements: List[str]) -> None:
    stmt = "".join(buf).strip()
    if stmt:
        statements.append(stmt)


def is_database_level(statement: str) -> bool:
    return bool(_DATABASE_LEVEL.match(statement))


def is_structural(statement: str) -> bool:
    """ALTER TABLE / CREATE INDEX: statements that reshape existing rows."""
    return bool(_STRUCTURAL.match(statement))


def summarize(statement: str, width: int = 80) -> str:
    one_line = " ".join(statement.split())
    return one_line if len(one_line) <= width else one_line[: width - 3] + "..."
