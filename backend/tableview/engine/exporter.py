from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Protocol, Sequence

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from .dataset import EMPTY, Row, normalize_cell

logger = logging.getLogger(__name__)

SHEET_NAME = "Filtered Data"
PLACEHOLDER = "N/A"
DEFAULT_FILENAME = "Filtered_Data.xlsx"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class FileSaveSink(Protocol):
    def save(self, data: bytes, filename: str) -> None: ...


class DirectorySink:
    """Writes export bytes into a directory, one file per save."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def save(self, data: bytes, filename: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # keep the caller's name but never a path outside the directory
        target = self.directory / Path(filename).name
        target.write_bytes(data)
        logger.info("Saved export %s (%d bytes)", target, len(data))


def _export_cell(value: Any) -> Any:
    value = normalize_cell(value)
    if value is EMPTY or value == "":
        return PLACEHOLDER
    if isinstance(value, str):
        # control characters are not allowed in worksheet XML
        return ILLEGAL_CHARACTERS_RE.sub("", value) or PLACEHOLDER
    return value


def export_rows(columns: Sequence[str], rows: Sequence[Row]) -> bytes:
    """Serialize rows into an xlsx workbook with a single "Filtered Data" sheet."""
    records = [[_export_cell(row.get(c)) for c in columns] for row in rows]
    header = [ILLEGAL_CHARACTERS_RE.sub("", str(c)) for c in columns]
    df = pd.DataFrame(records, columns=header, dtype=object)

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        # cell text is written as text, never as a formula
        for row in writer.sheets[SHEET_NAME].iter_rows():
            for cell in row:
                if cell.data_type == "f":
                    cell.data_type = "s"
    return buf.getvalue()


def save_export(
    sink: FileSaveSink,
    columns: Sequence[str],
    rows: Sequence[Row],
    filename: str = DEFAULT_FILENAME,
) -> None:
    sink.save(export_rows(columns, rows), filename)
