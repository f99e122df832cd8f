"""
Page accumulation: turns a paged Airtable select into one array-of-arrays table.
Row 0 is the header, rows 1..n are the records in page-then-record order.
Airtable delivers the primary field last; every row gets it moved to the front so the
shape matches what spreadsheet sources produce.
"""

import logging
from typing import Any

from .errors import RetrievalError

logger = logging.getLogger(__name__)


def shift_last_item_to_first_index(items: list) -> list:
    """Return a copy of items with the last element moved to index 0."""
    if not items:
        return []
    return [items[-1], *items[:-1]]


def load_table_data(source, table: str, select_options: dict[str, Any] | None = None) -> list[list[Any]]:
    """
    Fetch every page of `table` from `source` and return the normalized table.

    source: anything with select(table, select_options) yielding pages (lists of records with "fields").
            If it also has table_fields(table), that is used to build a header for an empty table.

    Airtable leaves empty cells out of a record's fields, so a column may first show up
    in a later record. Such columns are placed just before the primary field (still last
    at that point) and earlier rows get None there. Records with no fields at all don't
    set the column order. Every row has the header's length.
    """
    raw_keys: list[str] | None = None
    known: set[str] = set()
    collected: list[dict[str, Any]] = []
    pages = 0

    try:
        for page in source.select(table, select_options or {}):
            pages += 1
            for record in page:
                fields = record.get("fields") or {}
                if raw_keys is None:
                    # blank records carry no keys; the first non-blank one fixes the order
                    if fields:
                        raw_keys = list(fields)
                        known.update(raw_keys)
                else:
                    for key in fields:
                        if key not in known:
                            known.add(key)
                            raw_keys.insert(max(len(raw_keys) - 1, 0), key)
                collected.append(fields)
    except RetrievalError as e:
        if e.table is None:
            e.table = table
        raise

    if raw_keys is None:
        header = _schema_header(source, table, select_options)
        if not header:
            logger.info("Table %s is empty", table)
            return []
        logger.info("Table %s has no values, header from schema", table)
        raw_keys = header

    rows = [shift_last_item_to_first_index(raw_keys)]
    for fields in collected:
        rows.append(shift_last_item_to_first_index([fields.get(key) for key in raw_keys]))
    logger.info("Table %s: %d rows, %d columns from %d pages", table, len(collected), len(raw_keys), pages)
    return rows


def _schema_header(source, table: str, select_options: dict[str, Any] | None) -> list[str] | None:
    """Header from schema metadata, limited to the `fields` select option when set."""
    table_fields = getattr(source, "table_fields", None)
    if table_fields is None:
        return None
    names = table_fields(table)
    if not names:
        return None
    wanted = (select_options or {}).get("fields")
    if wanted:
        wanted = {wanted} if isinstance(wanted, str) else set(wanted)
        names = [name for name in names if name in wanted]
    return names or None
