"""Data ingestion loaders for client configs and CSV extracts."""

from .extracts import LoadedExtract, load_extract, parse_rows, rows_to_text
from .sources import fetch_text, join_location, open_session
from .client_config import ClientConfig, KpiDefinition
from .client_config import load_client_config, load_client_registry, parse_client_config

__all__ = [
    "LoadedExtract",
    "load_extract",
    "parse_rows",
    "rows_to_text",
    "fetch_text",
    "join_location",
    "open_session",
    "ClientConfig",
    "KpiDefinition",
    "load_client_config",
    "load_client_registry",
    "parse_client_config",
]
