from __future__ import annotations

import json
import shutil
from pathlib import Path

from ..config import settings
from ..engine import dataset as dataset_mod
from ..engine.dataset import Dataset

ROWS_FILE = "rows.json"


def dataset_dir(dataset_id: str) -> Path:
    # ids are content hashes; strip any path parts a client might send
    return settings.DATA_DIR / Path(dataset_id).name


def rows_path(dataset_id: str) -> Path:
    return dataset_dir(dataset_id) / ROWS_FILE


def dataset_exists(dataset_id: str) -> bool:
    return rows_path(dataset_id).exists()


def write_dataset(ds: Dataset, path: Path) -> None:
    """Persist columns + rows; written to a temp file then swapped in."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps({"columns": list(ds.columns), "rows": list(ds.rows)}))
    tmp.replace(path)


def read_dataset(path: Path) -> Dataset:
    payload = json.loads(path.read_text())
    columns = payload.get("columns") or []
    rows = payload.get("rows") or []
    if not rows:
        return Dataset(rows=(), columns=tuple(columns))
    return dataset_mod.load(rows, known_columns=columns)


def delete_dataset(dataset_id: str) -> bool:
    updir = dataset_dir(dataset_id)
    if not updir.is_dir():
        return False
    shutil.rmtree(updir, ignore_errors=True)
    return True
