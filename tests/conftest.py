import pytest


def record(fields, record_id="rec"):
    return {"id": record_id, "createdTime": "2024-01-01T00:00:00.000Z", "fields": fields}


class FakeSource:
    """Page source that hands out pre-built pages, like AirtableClient.select()."""

    def __init__(self, pages, fields=None, error=None, error_after=None):
        self.pages = pages
        self.fields = fields
        self.error = error
        self.error_after = error_after
        self.calls = []

    def select(self, table, select_options):
        self.calls.append((table, select_options))
        for i, page in enumerate(self.pages):
            if self.error is not None and self.error_after == i:
                raise self.error
            yield page
        if self.error is not None and self.error_after is None:
            raise self.error

    def table_fields(self, table):
        return self.fields


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.payload = payload
        self.text = text

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.headers = {}
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def no_airtable_env(monkeypatch):
    monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)
    monkeypatch.delenv("AIRTABLE_BASE_ID", raising=False)
