"""Table type lookup. Unknown or missing types fall back to the default table."""

import logging

from .tables import DefaultTable, KeyValueTable, ObjectArrayTable, ResponsesTable

logger = logging.getLogger(__name__)

DEFAULT_TYPE = "default"

TABLE_TYPES = {
    "default": DefaultTable(),
    "responses": ResponsesTable(),
    "keyvalue": KeyValueTable(),
    "objectarray": ObjectArrayTable(),
}


def resolve_strategy(declared_type: str | None):
    """Case-insensitive lookup of a table type; never raises."""
    if not declared_type:
        return TABLE_TYPES[DEFAULT_TYPE]
    strategy = TABLE_TYPES.get(declared_type.lower())
    if strategy is None:
        logger.warning("Unknown table type %r, using %s", declared_type, DEFAULT_TYPE)
        return TABLE_TYPES[DEFAULT_TYPE]
    return strategy
