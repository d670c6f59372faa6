"""Runtime schema synchronisation for databases created by an older release."""

from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateColumn, CreateIndex, MetaData

logger = logging.getLogger(__name__)


def sync_missing_schema_objects(engine: Engine, metadata: MetaData) -> list[str]:
    """Add columns and indexes that the models declare but an existing table lacks.

    Missing tables are left to ``metadata.create_all``. Returns a description of
    every object that was added, e.g. ``["surveys.access_type"]``.
    """
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    preparer = engine.dialect.identifier_preparer
    added: list[str] = []

    with engine.begin() as conn:
        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue

            known_columns = {col["name"] for col in inspector.get_columns(table.name)}
            for column in table.columns:
                if column.name in known_columns:
                    continue
                ddl = str(CreateColumn(column).compile(dialect=engine.dialect)).strip()
                conn.execute(text(f"ALTER TABLE {preparer.format_table(table)} ADD COLUMN {ddl}"))
                # Backfill rows that predate the column with the model's scalar default.
                default = getattr(column.default, "arg", None)
                if default is not None and not callable(default):
                    conn.execute(
                        text(
                            f"UPDATE {preparer.format_table(table)} "
                            f"SET {preparer.quote(column.name)} = :value "
                            f"WHERE {preparer.quote(column.name)} IS NULL"
                        ),
                        {"value": default},
                    )
                added.append(f"{table.name}.{column.name}")

            known_indexes = {idx.get("name") for idx in inspector.get_indexes(table.name)}
            for index in table.indexes:
                if not index.name or index.name in known_indexes:
                    continue
                conn.execute(CreateIndex(index))
                added.append(f"{table.name}:{index.name}")

    for name in added:
        logger.info("[schema] added %s", name)
    return added
