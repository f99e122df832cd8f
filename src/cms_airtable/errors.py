"""Error types raised by the Airtable CMS integration."""

MODULE = "cms-airtable"


class CmsError(Exception):
    """Base error. `module` tags the integration so hosts can tell plugins apart."""

    def __init__(self, message: str, code: str | None = None, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or "ERR_PLUGIN"
        self.module = MODULE
        self.hint = hint

    def __str__(self) -> str:
        text = f"[{self.module}] {self.message}"
        if self.hint:
            text += f" ({self.hint})"
        return text


class ConfigurationError(CmsError):
    """Missing credentials or an invalid table configuration."""


class RetrievalError(CmsError):
    """Airtable reported a failure while paging through a table."""

    def __init__(self, message: str, code: str | None = None, table: str | None = None):
        super().__init__(message, code=code)
        self.table = table


class StrategyMismatchError(CmsError):
    """A table's columns don't satisfy the requirements of its table type."""

    def __init__(self, table: str, requirement: str):
        super().__init__(f"Table '{table}' {requirement}", code="ERR_TABLE_TYPE")
        self.table = table
        self.requirement = requirement
