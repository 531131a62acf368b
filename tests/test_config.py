from utils.config import DEFAULT_SQL_FILE, DatabaseConfig, load_config


class TestLoadConfig:
    def test_defaults(self, monkeypatch):
        for name in ("DB_DRIVER", "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME", "DB_SQL_FILE", "DB_ECHO"):
            monkeypatch.delenv(name, raising=False)
        config = load_config()

        assert config.driver == "mysql+pymysql"
        assert config.host == "localhost"
        assert config.port == 3306
        assert config.database == "anime_db"
        assert config.ddl_path == DEFAULT_SQL_FILE
        assert config.echo is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db.internal")
        monkeypatch.setenv("DB_PORT", "3307")
        monkeypatch.setenv("DB_NAME", "catalog_test")
        monkeypatch.setenv("DB_ECHO", "yes")
        config = load_config(ddl_path="/tmp/schema.sql")

        assert (config.host, config.port, config.database) == ("db.internal", 3307, "catalog_test")
        assert config.echo is True
        assert config.ddl_path == "/tmp/schema.sql"


class TestDatabaseConfig:
    def test_url_with_and_without_database(self):
        config = DatabaseConfig(user="admin", password="secret", host="db", port=3306, database="anime_db")

        assert config.url().database == "anime_db"
        assert config.url(with_database=False).database is None
        assert config.url().drivername == "mysql+pymysql"

    def test_password_never_described(self):
        config = DatabaseConfig(password="secret")
        assert "secret" not in config.describe()
        assert "secret" not in repr(config)

    def test_sqlite_url_keeps_database(self, tmp_path):
        config = DatabaseConfig(driver="sqlite", database=str(tmp_path / "a.db"))
        assert config.is_sqlite is True
        assert config.url(with_database=False).database == str(tmp_path / "a.db")
