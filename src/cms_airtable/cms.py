"""
Airtable CMS plugin: retrieves every configured table when a request starts and
publishes the reshaped data into the request's `cms` dict under the table name.
"""

import copy
import logging
from typing import Any, Mapping

from .accumulator import load_table_data
from .config_loader import CmsConfig, TableConfig, build_config
from .errors import ConfigurationError
from .extract_airtable import AirtableClient
from .lifecycle import App, Middleware, Plugin, RequestContext
from .registry import resolve_strategy

logger = logging.getLogger(__name__)


class AirtableTable(Plugin):
    """One configured table: hooks its retrieval into the CMS `retrieve` phase."""

    def __init__(self, config: TableConfig):
        self.config = config
        self.strategy = resolve_strategy(config.type)
        self.cms: "AirtableCMS | None" = None

    def install(self, cms: "AirtableCMS") -> None:
        self.cms = cms
        cms.middleware("retrieve").use(self.retrieve)

    def uninstall(self, cms: "AirtableCMS") -> None:
        cms.middleware("retrieve").remove(self.retrieve)
        self.cms = None

    def retrieve(self, context: RequestContext) -> None:
        # each fetch gets its own copy; the configured options stay untouched
        select_options = copy.deepcopy(dict(self.config.select_options))
        rows = self.cms.load_table_data(select_options, self.config.name)
        context.cms[self.config.name] = self.strategy.normalize(rows, self.config)


class AirtableCMS(Plugin):
    """
    config: CmsConfig or a plain dict (validated with build_config).
    client: optional pre-built source with select()/table_fields(); built from the
            credentials at install time otherwise.
    """

    def __init__(self, config: CmsConfig | dict[str, Any] | None = None, client=None):
        if not isinstance(config, CmsConfig):
            config = build_config(config)
        self.config = config
        self.client = client
        self.phases = {"retrieve": Middleware("retrieve")}
        self.tables: list[AirtableTable] = []

    def middleware(self, name: str) -> Middleware:
        return self.phases[name]

    def use(self, *tables: AirtableTable) -> None:
        for table in tables:
            table.install(self)
            self.tables.append(table)

    def install(self, app) -> None:
        if not self.config.enabled:
            logger.info("Airtable CMS disabled, nothing installed")
            return
        if not self.config.api_key:
            raise ConfigurationError(
                "Can't find api key",
                hint="To use the Airtable integration you have to provide a valid api key "
                "(api_key in config or AIRTABLE_API_KEY)",
            )
        if not self.config.base_id:
            raise ConfigurationError(
                "Can't find baseId",
                hint="To use the Airtable integration you have to provide a base id "
                "(base_id in config or AIRTABLE_BASE_ID)",
            )

        if self.client is None:
            self.client = AirtableClient(
                self.config.api_key,
                self.config.base_id,
                api_url=self.config.api_url,
                timeout=self.config.timeout,
            )
        self.use(*(AirtableTable(table) for table in self.config.tables))
        app.middleware("setup").use(self.retrieve_spreadsheet_data)
        logger.info("Airtable CMS installed with %d tables", len(self.tables))

    def uninstall(self, app) -> None:
        app.middleware("setup").remove(self.retrieve_spreadsheet_data)
        for table in self.tables:
            table.uninstall(self)
        self.tables = []

    def retrieve_spreadsheet_data(self, context: RequestContext) -> None:
        self.middleware("retrieve").run(context, concurrent=self.config.concurrent)

    def load_table_data(self, select_options: Mapping[str, Any], table: str) -> list[list[Any]]:
        return load_table_data(self.client, table, select_options)


def retrieve_all(config: CmsConfig | dict[str, Any], client=None) -> dict[str, Any]:
    """Install into a throwaway App, run one retrieval pass and return the published data."""
    app = App()
    app.use(AirtableCMS(config, client=client))
    context = RequestContext()
    app.middleware("setup").run(context)
    return context.cms
