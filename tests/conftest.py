import pytest

from descriptor.catalog import CATALOG_SCHEMA
from fakes import FAKE_SCRIPT, FakeAdapter, healthy_tables


@pytest.fixture
def descriptor():
    return CATALOG_SCHEMA


@pytest.fixture
def healthy_db():
    db = FakeAdapter(tables=healthy_tables())
    db.indexes.add("idx_temporada_numero")
    return db


@pytest.fixture
def ddl_script():
    return FAKE_SCRIPT
