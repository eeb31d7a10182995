"""
Loader for per-client config documents and the client registry.

A config document declares the client's data sources, the KPIs to compute
and the layout sections to render:

    {
      "clientId": "...", "name": "...", "shortName": "...",
      "dataSources": {"<logical name>": "<file name>", ...},
      "kpis": [{"key": "...", "label": "...", "formulaKey": "..."}, ...],
      "layout": {"sections": ["kpiCards", ...]},
      "columnMapping": {"<column role>": "<csv header>", ...}   (optional)
    }

Documents are validated once, here, against a JSON Schema whose enums are
taken from the formula registry and the section enumeration. Nothing
downstream re-checks optional fields.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

import aiohttp
from jsonschema import Draft202012Validator

from ..config import (
    CLIENT_ID_PATTERN,
    CLIENT_REGISTRY_FILE,
    CONFIG_DIR,
    DEFAULT_COLUMNS,
    SECTIONS,
)
from ..errors import ConfigInvalid, ConfigNotFound, DataSourceMissing
from .sources import fetch_text, join_location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KpiDefinition:
    key: str
    label: str
    formula_key: str


@dataclass(frozen=True)
class ClientConfig:
    client_id: str
    name: str
    short_name: str
    data_sources: Mapping[str, str]
    kpis: tuple[KpiDefinition, ...]
    sections: tuple[str, ...]
    column_mapping: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d = {
            "clientId": self.client_id,
            "name": self.name,
            "shortName": self.short_name,
            "dataSources": dict(self.data_sources),
            "kpis": [
                {"key": k.key, "label": k.label, "formulaKey": k.formula_key}
                for k in self.kpis
            ],
            "layout": {"sections": list(self.sections)},
        }
        if self.column_mapping:
            d["columnMapping"] = dict(self.column_mapping)
        return d


def get_config_schema() -> dict[str, Any]:
    """JSON Schema for client config documents."""
    from ..formulas import FORMULAS

    non_empty = {"type": "string", "minLength": 1}
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": "ClientConfig",
        "type": "object",
        "required": ["clientId", "name", "shortName", "dataSources", "kpis", "layout"],
        "properties": {
            "clientId": {"type": "string", "pattern": CLIENT_ID_PATTERN},
            "name": non_empty,
            "shortName": non_empty,
            "dataSources": {
                "type": "object",
                "additionalProperties": non_empty,
            },
            "kpis": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["key", "label", "formulaKey"],
                    "properties": {
                        "key": non_empty,
                        "label": {"type": "string"},
                        "formulaKey": {"enum": sorted(FORMULAS)},
                    },
                },
            },
            "layout": {
                "type": "object",
                "required": ["sections"],
                "properties": {
                    "sections": {
                        "type": "array",
                        "items": {"enum": list(SECTIONS)},
                    },
                },
            },
            "columnMapping": {
                "type": "object",
                "propertyNames": {"enum": list(DEFAULT_COLUMNS)},
                "additionalProperties": non_empty,
            },
        },
    }


def _field_path(error) -> str:
    """Render a jsonschema error location as ``kpis[2].formulaKey``."""
    parts = list(error.absolute_path)
    if error.validator == "required" and isinstance(error.instance, dict):
        missing = [p for p in error.validator_value if p not in error.instance]
        if missing:
            parts.append(missing[0])
    elif "propertyNames" in error.absolute_schema_path:
        parts.append(error.instance)

    path = ""
    for p in parts:
        if isinstance(p, int):
            path += f"[{p}]"
        else:
            path += f".{p}" if path else str(p)
    return path


def parse_client_config(doc: Any, client_id: str) -> ClientConfig:
    """Validate a decoded config document and build a ClientConfig.

    Raises
    ------
    ConfigInvalid : on the first schema violation, a clientId that does not
                    match ``client_id``, or duplicate KPI keys.
    """
    validator = Draft202012Validator(get_config_schema())
    errors = sorted(validator.iter_errors(doc), key=_field_path)
    if errors:
        for e in errors:
            logger.error("Config '%s' %s: %s", client_id, _field_path(e) or "<root>", e.message)
        first = errors[0]
        raise ConfigInvalid(client_id, _field_path(first), first.message)

    if doc["clientId"] != client_id:
        raise ConfigInvalid(
            client_id, "clientId", f"document is for client '{doc['clientId']}'"
        )

    seen: set[str] = set()
    for i, kpi in enumerate(doc["kpis"]):
        if kpi["key"] in seen:
            raise ConfigInvalid(client_id, f"kpis[{i}].key", f"duplicate KPI key '{kpi['key']}'")
        seen.add(kpi["key"])

    return ClientConfig(
        client_id=doc["clientId"],
        name=doc["name"],
        short_name=doc["shortName"],
        data_sources=dict(doc["dataSources"]),
        kpis=tuple(
            KpiDefinition(key=k["key"], label=k["label"], formula_key=k["formulaKey"])
            for k in doc["kpis"]
        ),
        sections=tuple(doc["layout"]["sections"]),
        column_mapping=dict(doc.get("columnMapping", {})),
    )


async def load_client_config(
    client_id: str,
    root: str,
    session: aiohttp.ClientSession | None = None,
) -> ClientConfig:
    """Fetch and validate the config document for ``client_id``.

    Raises
    ------
    ConfigNotFound : no document exists for the client.
    ConfigInvalid : the client id is malformed, or the document is not valid
                    JSON or fails validation.
    DataSourceFetchFailed : the document could not be read.
    """
    if not re.fullmatch(CLIENT_ID_PATTERN, client_id):
        raise ConfigInvalid(client_id, "clientId", "must contain only letters, digits, '_' or '-'")

    location = join_location(root, CONFIG_DIR, f"{client_id}.json")
    try:
        text = await fetch_text(location, session)
    except DataSourceMissing:
        raise ConfigNotFound(client_id) from None

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigInvalid(client_id, "", f"not valid JSON ({e})") from e

    config = parse_client_config(doc, client_id)
    logger.info(
        "Loaded config for '%s': %d data sources, %d KPIs, %d sections",
        client_id, len(config.data_sources), len(config.kpis), len(config.sections),
    )
    return config


_REGISTRY_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "name", "shortName"],
        "properties": {
            "id": {"type": "string", "pattern": CLIENT_ID_PATTERN},
            "name": {"type": "string"},
            "shortName": {"type": "string"},
        },
    },
}


async def load_client_registry(
    root: str,
    session: aiohttp.ClientSession | None = None,
) -> list[dict]:
    """Return the ordered list of ``{id, name, shortName}`` client entries."""
    location = join_location(root, CLIENT_REGISTRY_FILE)
    try:
        doc = json.loads(await fetch_text(location, session))
    except DataSourceMissing:
        logger.warning("No client registry at %s", location)
        return []
    except json.JSONDecodeError as e:
        raise ConfigInvalid("<registry>", "", f"not valid JSON ({e})") from e

    errors = sorted(Draft202012Validator(_REGISTRY_SCHEMA).iter_errors(doc), key=_field_path)
    if errors:
        raise ConfigInvalid("<registry>", _field_path(errors[0]), errors[0].message)

    return [{"id": c["id"], "name": c["name"], "shortName": c["shortName"]} for c in doc]
