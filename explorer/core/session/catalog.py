"""
CATALOG MODULE - Tables and typed columns of the loaded dataset

Purpose:
    1. Read the engine's internal schema table once the dataset is ready
    2. Turn every CREATE TABLE text into column metadata
    3. Provide the table -> columns mapping used for editor hints

Column parsing is a deliberately small textual extraction, not a DDL parser.
Only the first two space-separated tokens of a definition line are used, so
"name VARCHAR 255" and "id INT NOT NULL" keep "VARCHAR" and "INT" only.
"""

import logging
from typing import Dict, List, Sequence

from explorer.core.errors import EngineQueryError
from explorer.core.schemas import ColumnMetadata, QueryError, TableDescriptor

logger = logging.getLogger(__name__)

# Columns (positional): type, name, tbl_name, rootpage, sql
CATALOG_QUERY = "SELECT * FROM sqlite_master"
NAME_COLUMN = 1
DEFINITION_COLUMN = 4


def parse_columns(definition_text: str) -> List[ColumnMetadata]:
    """
    Extract column names and type tags from a table definition.

    Steps:
        - take the text between the first "(" and the last ")"
        - one segment per physical line, stripped, one trailing comma removed
        - split on single spaces: token 1 is the name, token 2 the type

    A segment with a single token yields declared_type=None. Text without
    parentheses is read as a bare column list.

    Example:
        "CREATE TABLE t(\\nid INT,\\nname TEXT\\n)"
            -> [ColumnMetadata("id", "INT"), ColumnMetadata("name", "TEXT")]
    """
    # Without parentheses the whole text is taken as the column list
    start = definition_text.find("(") + 1
    end = definition_text.rfind(")")
    if end < start:
        end = len(definition_text)

    columns = []
    for line in definition_text[start:end].splitlines():
        segment = line.strip()
        if segment.endswith(","):
            segment = segment[:-1]
        if not segment:
            continue

        tokens = segment.split(" ")
        if len(tokens) < 2:
            logger.debug(f"Column definition without type: {segment!r}")
            columns.append(ColumnMetadata(name=tokens[0]))
            continue

        columns.append(ColumnMetadata(name=tokens[0], declared_type=tokens[1]))

    return columns


def build_catalog(rows: Sequence[Sequence]) -> List[TableDescriptor]:
    """One TableDescriptor per catalog row, in catalog order."""
    tables = []
    for row in rows:
        definition_text = row[DEFINITION_COLUMN] or ""
        tables.append(
            TableDescriptor(
                name=row[NAME_COLUMN],
                definition_text=definition_text,
                columns=tuple(parse_columns(definition_text)),
            )
        )
    return tables


def hint_tables(catalog: Sequence[TableDescriptor]) -> Dict[str, List[str]]:
    """Table name -> column names, the shape SQL editors take for completion."""
    return {table.name: [column.name for column in table.columns] for table in catalog}


class SchemaIntrospector:
    def __init__(self, store):
        self.store = store

    def load_catalog(self, database) -> List[TableDescriptor]:
        """
        Query the schema table and publish the catalog.

        A failure lands in the QueryError slot and leaves the session usable.
        """
        try:
            results = database.execute(CATALOG_QUERY)
        except EngineQueryError as e:
            logger.error(f"Catalog query failed: {e.message}")
            self.store.update(results=None, error=QueryError(message=e.message))
            return []

        rows = results[0].rows if results else ()
        catalog = build_catalog(rows)
        self.store.update(catalog=tuple(catalog))
        logger.info(f"Catalog loaded: {len(catalog)} object(s)")
        return catalog

    def on_state_change(self, previous, current):
        """Store subscriber: load the catalog on the transition into READY."""
        if current.database is not None and previous.database is None:
            self.load_catalog(current.database)
