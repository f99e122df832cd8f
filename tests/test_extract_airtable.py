"""Tests for cms_airtable.extract_airtable."""

import threading

import pytest
import requests

from cms_airtable.errors import ConfigurationError, RetrievalError
from cms_airtable.extract_airtable import AirtableClient, select_params

from conftest import FakeResponse, FakeSession, record


def client(responses):
    session = FakeSession(responses)
    return AirtableClient("key123", "appBase", session_factory=lambda: session), session


def test_select_params_translation():
    params = select_params({
        "fields": ["Name", "ID"],
        "sort": [{"field": "Name", "direction": "desc"}, {"field": "ID"}],
        "view": "Grid view",
        "maxRecords": 10,
        "filterByFormula": None,
    })
    assert params == {
        "fields[]": ["Name", "ID"],
        "sort[0][field]": "Name",
        "sort[0][direction]": "desc",
        "sort[1][field]": "ID",
        "sort[1][direction]": "asc",
        "view": "Grid view",
        "maxRecords": 10,
    }


def test_auth_header_set():
    c, session = client([])
    assert c.session is session
    assert session.headers["Authorization"] == "Bearer key123"


def test_select_follows_offset():
    c, session = client([
        FakeResponse(payload={"records": [record({"ID": 1})], "offset": "itr1"}),
        FakeResponse(payload={"records": [record({"ID": 2})], "offset": "itr2"}),
        FakeResponse(payload={"records": [record({"ID": 3})]}),
    ])
    pages = list(c.select("My Table", {"view": "Grid view"}))
    assert [[r["fields"]["ID"] for r in page] for page in pages] == [[1], [2], [3]]
    assert session.calls[0]["url"] == "https://api.airtable.com/v0/appBase/My%20Table"
    assert "offset" not in session.calls[0]["params"]
    assert session.calls[1]["params"] == {"view": "Grid view", "offset": "itr1"}
    assert session.calls[2]["params"]["offset"] == "itr2"


def test_select_is_lazy():
    c, session = client([
        FakeResponse(payload={"records": [], "offset": "itr1"}),
        FakeResponse(payload={"records": []}),
    ])
    pages = c.select("T")
    assert session.calls == []
    next(pages)
    assert len(session.calls) == 1


def test_http_error_raises_retrieval_error():
    c, _ = client([FakeResponse(
        status_code=404,
        payload={"error": {"type": "TABLE_NOT_FOUND", "message": "Could not find table Missing"}},
    )])
    with pytest.raises(RetrievalError) as exc:
        list(c.select("Missing"))
    assert exc.value.message == "Could not find table Missing"
    assert exc.value.code == "TABLE_NOT_FOUND"
    assert exc.value.table == "Missing"


def test_string_error_body():
    c, _ = client([FakeResponse(status_code=404, payload={"error": "NOT_FOUND"})])
    with pytest.raises(RetrievalError, match="NOT_FOUND"):
        list(c.select("T"))


def test_non_json_error_body():
    c, _ = client([FakeResponse(status_code=502, text="Bad Gateway")])
    with pytest.raises(RetrievalError) as exc:
        list(c.select("T"))
    assert exc.value.code == "HTTP_502"


def test_transport_error():
    c, _ = client([requests.ConnectionError("connection refused")])
    with pytest.raises(RetrievalError, match="connection refused"):
        list(c.select("T"))


def test_error_on_second_page():
    c, _ = client([
        FakeResponse(payload={"records": [record({"ID": 1})], "offset": "itr1"}),
        FakeResponse(status_code=429, payload={"error": {"type": "RATE_LIMIT_REACHED", "message": "Rate limit"}}),
    ])
    pages = c.select("T")
    assert len(next(pages)) == 1
    with pytest.raises(RetrievalError, match="Rate limit"):
        next(pages)


def test_table_fields_primary_last():
    c, session = client([FakeResponse(payload={"tables": [
        {"id": "tblOther", "name": "Other", "primaryFieldId": "f0", "fields": [{"id": "f0", "name": "X"}]},
        {
            "id": "tblPeople",
            "name": "People",
            "primaryFieldId": "fld1",
            "fields": [
                {"id": "fld1", "name": "ID"},
                {"id": "fld2", "name": "Name"},
                {"id": "fld3", "name": "Age"},
            ],
        },
    ]})])
    assert c.table_fields("People") == ["Name", "Age", "ID"]
    assert session.calls[0]["url"] == "https://api.airtable.com/v0/meta/bases/appBase/tables"


def test_table_fields_unavailable():
    c, _ = client([FakeResponse(status_code=403, payload={"error": {"type": "INVALID_PERMISSIONS", "message": "no"}})])
    assert c.table_fields("People") is None


def test_table_fields_unknown_table():
    c, _ = client([FakeResponse(payload={"tables": []})])
    assert c.table_fields("People") is None


def test_single_field_string_not_split():
    assert select_params({"fields": "Name"}) == {"fields[]": ["Name"]}


def test_sort_entry_without_field():
    with pytest.raises(ConfigurationError, match="Sort entry 0"):
        select_params({"sort": [{"direction": "desc"}]})
    with pytest.raises(ConfigurationError):
        select_params({"sort": ["Name"]})


def test_each_thread_gets_its_own_session():
    sessions = []
    lock = threading.Lock()

    def new_session():
        session = FakeSession([FakeResponse(payload={"records": [record({"ID": 1})]})])
        with lock:
            sessions.append(session)
        return session

    c = AirtableClient("key123", "appBase", session_factory=new_session)
    barrier = threading.Barrier(2, timeout=5)
    used = {}

    def fetch(name):
        barrier.wait()
        used[name] = c.session
        list(c.select(name))

    threads = [threading.Thread(target=fetch, args=(name,)) for name in ("A", "B")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(sessions) == 2
    assert used["A"] is not used["B"]
    assert all(len(s.calls) == 1 for s in sessions)
    assert all(s.headers["Authorization"] == "Bearer key123" for s in sessions)


def test_session_reused_within_thread():
    created = []

    def new_session():
        created.append(FakeSession([]))
        return created[-1]

    c = AirtableClient("key123", "appBase", session_factory=new_session)
    assert c.session is c.session
    assert len(created) == 1
