# utils/config.py
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine import URL

load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_SQL_FILE = os.path.join(PROJECT_ROOT, "database.sql")


class DatabaseConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    driver: str = "mysql+pymysql"
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = Field(default="", repr=False)
    database: str = "anime_db"
    ddl_path: str = DEFAULT_SQL_FILE
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.driver.startswith("sqlite")

    def url(self, with_database: bool = True) -> URL:
        """SQLAlchemy URL; SQLite always points at its database file."""
        if self.is_sqlite:
            return URL.create(self.driver, database=self.database)
        return URL.create(
            self.driver,
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database if with_database else None,
        )

    def describe(self) -> str:
        if self.is_sqlite:
            return f"{self.driver}:{self.database}"
        return f"{self.driver}://{self.user}@{self.host}:{self.port}/{self.database}"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config(ddl_path: Optional[str] = None) -> DatabaseConfig:
    """
    Minimal config loader: reads DB_* env vars (and .env).
    """
    return DatabaseConfig(
        driver=os.getenv("DB_DRIVER", "mysql+pymysql"),
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "3306")),
        user=os.getenv("DB_USER", "root"),
        password=os.getenv("DB_PASSWORD", ""),
        database=os.getenv("DB_NAME", "anime_db"),
        ddl_path=ddl_path or os.getenv("DB_SQL_FILE", DEFAULT_SQL_FILE),
        echo=_env_bool("DB_ECHO"),
    )
