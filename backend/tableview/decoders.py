"""Format decoders: file bytes in, rows out.

CSV and spreadsheet sources come back as arrays (row 0 is the header), JSON and
parquet sources as column-keyed records. The engine takes either shape.
"""
from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any, Callable

import pandas as pd

from .errors import ParseError
from .utils import frame_to_arrays, frame_to_records, json_safe_cell

logger = logging.getLogger(__name__)

DecodedRows = list[list[Any]] | list[dict[str, Any]]


def _text(content: bytes) -> str:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"File is not valid UTF-8 text: {e}")
    if not text.strip():
        raise ParseError("The file is empty or contains only whitespace.")
    return text


def decode_csv(content: bytes) -> DecodedRows:
    text = _text(content)
    options = dict(
        header=None,
        dtype=object,
        keep_default_na=False,
        skip_blank_lines=True,
        engine="python",
    )
    try:
        width = pd.read_csv(io.StringIO(text), nrows=1, **options).shape[1]
        # rows longer than the header lose their extra cells; short rows are padded
        df = pd.read_csv(
            io.StringIO(text),
            on_bad_lines=lambda fields: fields[:width],
            **options,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ParseError(f"Error parsing CSV file: {e}")
    return frame_to_arrays(df)


def decode_json(content: bytes) -> DecodedRows:
    text = _text(content)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Error parsing JSON file: {e}")

    # single objects are wrapped
    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        raise ParseError("Invalid JSON format. Expected an object or an array of objects.")
    if parsed and all(isinstance(r, list) for r in parsed):
        return [[json_safe_cell(v) for v in r] for r in parsed]
    if not all(isinstance(r, dict) for r in parsed):
        raise ParseError("Invalid JSON format. Expected an object or an array of objects.")
    return parsed


def decode_xlsx(content: bytes) -> DecodedRows:
    if not content:
        raise ParseError("The spreadsheet file is empty.")
    try:
        # first sheet only, header row kept as data
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, engine="openpyxl")
    except Exception as e:
        raise ParseError(f"Error reading XLSX file: {e}")
    df = df.dropna(how="all")
    if df.empty:
        raise ParseError("The XLSX file appears to be empty.")
    return frame_to_arrays(df)


def decode_parquet(content: bytes) -> DecodedRows:
    if not content:
        raise ParseError("The parquet file is empty.")
    try:
        df = pd.read_parquet(io.BytesIO(content))
    except Exception as e:
        raise ParseError(f"Could not parse parquet file: {e}")
    return frame_to_records(df)


DECODERS: dict[str, Callable[[bytes], DecodedRows]] = {
    "csv": decode_csv,
    "json": decode_json,
    "xlsx": decode_xlsx,
    "parquet": decode_parquet,
}


def format_for(filename: str) -> str:
    ext = Path(filename or "").suffix.lower().lstrip(".")
    if ext not in DECODERS:
        raise ParseError(
            f"Unsupported file type '.{ext}'. Allowed: "
            + ", ".join(f".{k}" for k in DECODERS)
        )
    return ext


def decode(filename: str, content: bytes) -> DecodedRows:
    """Decode file bytes with the decoder registered for the file's extension."""
    fmt = format_for(filename)
    rows = DECODERS[fmt](content)
    logger.debug("Decoded %s as %s: %d rows", filename, fmt, len(rows))
    return rows
