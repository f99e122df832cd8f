"""Load CMS config from YAML or a host-supplied dict, validated against schemas/cms_config.json."""

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import jsonschema
import yaml

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.airtable.com"
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "cms_config.json"


@dataclass(frozen=True)
class TableConfig:
    name: str
    type: str = "default"
    select_options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class CmsConfig:
    api_key: str | None
    base_id: str | None
    tables: tuple[TableConfig, ...] = ()
    enabled: bool = True
    concurrent: bool = True
    api_url: str = DEFAULT_API_URL
    timeout: float = 30


def load_schema(path: Path | None = None) -> dict[str, Any]:
    with open(path or SCHEMA_PATH, encoding="utf-8") as f:
        return json.load(f)


def build_config(data: dict[str, Any] | None) -> CmsConfig:
    """
    Build a CmsConfig from a plain mapping (parsed YAML or host config).
    api_key / base_id fall back to env AIRTABLE_API_KEY / AIRTABLE_BASE_ID.
    Table names must be unique; a table without `type` is a default table.
    """
    data = data or {}
    try:
        jsonschema.validate(instance=data, schema=load_schema())
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"Invalid config: {e.message}", code="ERR_CONFIG") from e

    tables = []
    seen = set()
    for entry in data.get("tables") or []:
        name = entry["name"]
        if name in seen:
            raise ConfigurationError(
                f"Duplicate table name: {name}",
                code="ERR_CONFIG",
                hint="Each table is published under its name, so names must be unique",
            )
        seen.add(name)
        tables.append(TableConfig(
            name=name,
            type=(entry.get("type") or "default").lower(),
            select_options=MappingProxyType(copy.deepcopy(entry.get("select_options") or {})),
        ))

    return CmsConfig(
        api_key=data.get("api_key") or os.environ.get("AIRTABLE_API_KEY"),
        base_id=data.get("base_id") or os.environ.get("AIRTABLE_BASE_ID"),
        tables=tuple(tables),
        enabled=data.get("enabled", True),
        concurrent=data.get("concurrent", True),
        api_url=data.get("api_url", DEFAULT_API_URL),
        timeout=data.get("timeout", 30),
    )


def load_config(config_path: str | Path | None = None) -> CmsConfig:
    base = Path(__file__).resolve().parent.parent.parent
    path = Path(config_path) if config_path else base / "config" / "cms_airtable.yaml"
    if not path.is_absolute():
        path = base / path
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", code="ERR_CONFIG")
    with open(path, encoding="utf-8") as f:
        return build_config(yaml.safe_load(f))
