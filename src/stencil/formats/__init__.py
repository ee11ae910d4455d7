"""Content decoding for datasources."""

from .decoder import parse_data, parse_map
from .parsers import (
    csv_rows,
    dotenv_object,
    json_array,
    json_object,
    json_value,
    to_json,
    toml_object,
    yaml_array,
    yaml_object,
)

__all__ = [
    "csv_rows",
    "dotenv_object",
    "json_array",
    "json_object",
    "json_value",
    "parse_data",
    "parse_map",
    "to_json",
    "toml_object",
    "yaml_array",
    "yaml_object",
]
