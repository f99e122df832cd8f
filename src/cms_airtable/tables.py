"""
Table types: each reshapes a normalized table (header row + data rows) for its consumer.
All types are stateless; normalize() never mutates the rows it is given.
"""

from typing import Any

from .config_loader import TableConfig
from .errors import StrategyMismatchError


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class DefaultTable:
    """Array of arrays, same as a spreadsheet integration would publish."""

    type_name = "default"

    def normalize(self, rows: list[list[Any]], table: TableConfig) -> list[list[Any]]:
        return [list(row) for row in rows]


class KeyValueTable:
    """
    First column is the key. With two columns the value is the second cell; with more,
    the value is a dict of the remaining header names to cells. Last duplicate key wins.
    Rows with an empty key are skipped.
    """

    type_name = "keyvalue"

    def normalize(self, rows: list[list[Any]], table: TableConfig) -> dict[Any, Any]:
        if not rows:
            return {}
        header = rows[0]
        if len(header) < 2:
            raise StrategyMismatchError(table.name, "needs a key column and at least one value column")

        result: dict[Any, Any] = {}
        for row in rows[1:]:
            key = row[0]
            if _is_empty(key):
                continue
            if len(header) == 2:
                result[key] = row[1]
            else:
                result[key] = dict(zip(header[1:], row[1:]))
        return result


class ObjectArrayTable:
    """One dict per data row, keyed by the header names."""

    type_name = "objectarray"

    def normalize(self, rows: list[list[Any]], table: TableConfig) -> list[dict[str, Any]]:
        if not rows:
            return []
        header = rows[0]
        if not header:
            raise StrategyMismatchError(table.name, "has no columns")
        if any(_is_empty(name) for name in header):
            raise StrategyMismatchError(table.name, "has a column without a name")
        if len(set(header)) != len(header):
            raise StrategyMismatchError(table.name, "has duplicate column names")
        return [dict(zip(header, row)) for row in rows[1:]]


class ResponsesTable:
    """
    Response texts per locale. First column is the response key, every other column a
    locale (e.g. en-US, de-DE). Output: {locale: {key: text}}. A key that appears on
    several rows becomes a list of variations in row order. Empty cells are skipped.
    """

    type_name = "responses"

    def normalize(self, rows: list[list[Any]], table: TableConfig) -> dict[str, dict[str, Any]]:
        if not rows:
            return {}
        header = rows[0]
        if len(header) < 2:
            raise StrategyMismatchError(table.name, "needs a key column and at least one locale column")
        locales = header[1:]
        if any(_is_empty(locale) for locale in locales):
            raise StrategyMismatchError(table.name, "has a locale column without a name")

        grouped: dict[str, dict[Any, list]] = {locale: {} for locale in locales}
        for row in rows[1:]:
            key = row[0]
            if _is_empty(key):
                continue
            for locale, value in zip(locales, row[1:]):
                if not _is_empty(value):
                    grouped[locale].setdefault(key, []).append(value)

        return {
            locale: {key: values[0] if len(values) == 1 else values for key, values in texts.items()}
            for locale, texts in grouped.items()
        }
