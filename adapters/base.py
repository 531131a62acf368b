# adapters/base.py

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

from descriptor.models import KeyKind

Params = Optional[Union[Sequence[Any], Dict[str, Any]]]


class LiveColumnInfo(BaseModel):
    """One column as introspected from the live database."""

    model_config = ConfigDict(frozen=True)

    field: str
    raw_type: str
    nullable: bool = True
    key_flag: KeyKind = KeyKind.NONE


class DatabaseAdapter(ABC):
    """
    Abstract connection provider consumed by the validator, repair engine and
    initializer. Implementations raise adapters.errors.DatabaseError (with a
    kind) for every failure.
    """

    dialect: str = "generic"

    @abstractmethod
    def query(self, sql: str, params: Params = None) -> List[Dict[str, Any]]:
        """Run a statement; return rows as dicts ([] for statements without rows)."""
        pass

    @abstractmethod
    def describe(self, table_name: str) -> List[LiveColumnInfo]:
        """Return live column descriptions for a table."""
        pass

    @abstractmethod
    def list_tables(self) -> List[str]:
        """Return table names in the current database."""
        pass

    @abstractmethod
    def database_exists(self, name: str) -> bool:
        """True when a database with exactly this name exists on the server."""
        pass

    @abstractmethod
    def create_database(self, name: str) -> None:
        pass

    def close(self) -> None:
        pass


# -------------------------------
# Adapter Factory
# -------------------------------

def adapter_factory(config: Any, with_database: bool = True) -> DatabaseAdapter:
    """
    Build the connection provider for a DatabaseConfig (or a plain dict with
    the same keys).

    SQL drivers (mysql+pymysql, sqlite, ...) go through SQLAdapter.
    """
    if isinstance(config, dict):
        from utils.config import DatabaseConfig
        config = DatabaseConfig(**config)

    driver = getattr(config, "driver", None)
    if not driver:
        raise ValueError("Config must include 'driver'")

    if driver.startswith(("mysql", "mariadb", "sqlite")):
        from .sql_adapter import SQLAdapter
        return SQLAdapter.from_config(config, with_database=with_database)

    raise ValueError(f"Unsupported driver: {driver}")
