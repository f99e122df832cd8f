"""Airtable CMS: retrieve Airtable tables as normalized rows and publish them per request."""

from .accumulator import load_table_data, shift_last_item_to_first_index
from .cms import AirtableCMS, AirtableTable, retrieve_all
from .config_loader import CmsConfig, TableConfig, build_config, load_config
from .errors import CmsError, ConfigurationError, RetrievalError, StrategyMismatchError
from .extract_airtable import AirtableClient
from .lifecycle import App, Middleware, RequestContext
from .registry import TABLE_TYPES, resolve_strategy

__all__ = [
    "AirtableCMS",
    "AirtableClient",
    "AirtableTable",
    "App",
    "CmsConfig",
    "CmsError",
    "ConfigurationError",
    "Middleware",
    "RequestContext",
    "RetrievalError",
    "StrategyMismatchError",
    "TABLE_TYPES",
    "TableConfig",
    "build_config",
    "load_config",
    "load_table_data",
    "resolve_strategy",
    "retrieve_all",
    "shift_last_item_to_first_index",
]
