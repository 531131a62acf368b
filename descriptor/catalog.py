# descriptor/catalog.py
from .models import ColumnSpec, KeyKind, SchemaDescriptor, TableSpec


def _pk(name: str = "id") -> ColumnSpec:
    return ColumnSpec(name=name, expected_type="int", key_kind=KeyKind.PRIMARY)


CATALOG_SCHEMA = SchemaDescriptor.from_tables(
    TableSpec(
        name="catalogo",
        columns=[
            _pk(),
            ColumnSpec(name="nombre", expected_type="varchar"),
            ColumnSpec(name="imagen_fondo", expected_type="varchar"),
            ColumnSpec(name="estado", expected_type="int"),
            ColumnSpec(name="descripcion", expected_type="text"),
            ColumnSpec(name="nsfw", expected_type="tinyint"),
            ColumnSpec(name="trailer", expected_type="varchar"),
            ColumnSpec(name="recomendacion", expected_type="tinyint"),
        ],
    ),
    TableSpec(
        name="temporada",
        columns=[
            _pk(),
            ColumnSpec(name="catalogo_id", expected_type="int"),
            ColumnSpec(name="nombre", expected_type="varchar"),
            ColumnSpec(name="portada", expected_type="varchar"),
            ColumnSpec(name="numero", expected_type="int"),
        ],
    ),
    TableSpec(
        name="capitulo",
        columns=[
            _pk(),
            ColumnSpec(name="numero", expected_type="int"),
            ColumnSpec(name="temporada_id", expected_type="int"),
            ColumnSpec(name="reproducciones", expected_type="int"),
        ],
    ),
    TableSpec(
        name="lenguaje",
        columns=[
            _pk(),
            ColumnSpec(name="nombre", expected_type="varchar"),
            ColumnSpec(name="codigo", expected_type="varchar"),
            ColumnSpec(name="ruta", expected_type="varchar"),
            ColumnSpec(name="estado", expected_type="int"),
            ColumnSpec(name="capitulo_id", expected_type="int"),
        ],
    ),
)

# Columns written by the catalog create/update handlers.
CATALOG_WRITE_COLUMNS = [
    "nombre", "estado", "imagen_fondo", "descripcion", "nsfw", "trailer", "recomendacion",
]
