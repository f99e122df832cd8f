"""Airtable REST client: pages through a table's records one page at a time."""

import logging
import threading
from typing import Any, Iterator
from urllib.parse import quote

import requests

from .errors import ConfigurationError, RetrievalError

logger = logging.getLogger(__name__)


def select_params(select_options: dict[str, Any] | None) -> dict[str, Any]:
    """
    Translate select options into Airtable query params, the same way the official client does.
    fields: ["Name", "ID"]                         -> fields[]=Name&fields[]=ID
    sort: [{"field": "Name", "direction": "desc"}] -> sort[0][field]=Name&sort[0][direction]=desc
    Unknown keys are passed through verbatim.
    """
    params: dict[str, Any] = {}
    for key, value in (select_options or {}).items():
        if value is None:
            continue
        if key == "fields":
            params["fields[]"] = [value] if isinstance(value, str) else list(value)
        elif key == "sort":
            for i, spec in enumerate(value):
                if not isinstance(spec, dict) or not spec.get("field"):
                    raise ConfigurationError(f"Sort entry {i} needs a field: {spec!r}", code="ERR_CONFIG")
                params[f"sort[{i}][field]"] = spec["field"]
                params[f"sort[{i}][direction]"] = spec.get("direction", "asc")
        else:
            params[key] = value
    return params


class AirtableClient:
    """
    Read-only access to one Airtable base.
    session_factory: builds a session (anything with .get and .headers); requests.Session by default.
    Each thread gets its own session, so tables can be fetched concurrently.
    """

    def __init__(
        self,
        api_key: str,
        base_id: str,
        api_url: str = "https://api.airtable.com",
        timeout: float = 30,
        session_factory=None,
    ):
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._session_factory = session_factory or requests.Session
        self._local = threading.local()

    @property
    def session(self):
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            session.headers.update({"Authorization": f"Bearer {self._api_key}"})
            self._local.session = session
        return session

    def _get(self, url: str, params: dict[str, Any] | None, table: str) -> dict[str, Any]:
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise RetrievalError(str(e), code=type(e).__name__, table=table) from e
        if resp.status_code >= 400:
            message, code = _error_details(resp)
            raise RetrievalError(message, code=code, table=table)
        try:
            return resp.json()
        except ValueError as e:
            raise RetrievalError(f"Invalid JSON from Airtable: {e}", code="INVALID_RESPONSE", table=table) from e

    def select(self, table: str, select_options: dict[str, Any] | None = None) -> Iterator[list[dict[str, Any]]]:
        """
        Yield one page of records (list of {"id", "fields", "createdTime"}) at a time.
        Follows `offset` until Airtable stops returning one.
        """
        url = f"{self.api_url}/v0/{self.base_id}/{quote(table, safe='')}"
        params = select_params(select_options)
        offset = None
        page = 0

        while True:
            page_params = dict(params)
            if offset:
                page_params["offset"] = offset
            data = self._get(url, page_params, table)
            page += 1
            records = data.get("records", [])
            logger.debug("Table %s: page %d with %d records", table, page, len(records))
            yield records
            offset = data.get("offset")
            if not offset:
                break

    def table_fields(self, table: str) -> list[str] | None:
        """
        Field names of a table from the base metadata API, primary field last
        (the order records are delivered in). None if metadata is unavailable.
        """
        url = f"{self.api_url}/v0/meta/bases/{self.base_id}/tables"
        try:
            data = self._get(url, None, table)
        except RetrievalError as e:
            logger.info("No schema metadata for table %s: %s", table, e.message)
            return None

        for meta in data.get("tables", []):
            if table not in (meta.get("name"), meta.get("id")):
                continue
            primary_id = meta.get("primaryFieldId")
            fields = meta.get("fields", [])
            names = [f["name"] for f in fields if f.get("id") != primary_id]
            names += [f["name"] for f in fields if f.get("id") == primary_id]
            return names
        return None


def _error_details(resp) -> tuple[str, str]:
    """Airtable errors look like {"error": {"type", "message"}} or {"error": "NOT_FOUND"}."""
    try:
        error = resp.json().get("error")
    except ValueError:
        error = None
    if isinstance(error, dict):
        return error.get("message") or error.get("type", "Unknown error"), error.get("type", f"HTTP_{resp.status_code}")
    if isinstance(error, str):
        return error, error
    return f"HTTP {resp.status_code}: {resp.text[:200]}", f"HTTP_{resp.status_code}"
