from __future__ import annotations

import json
import re
from itertools import count

from ..config import settings
from .store import dataset_dir, dataset_exists

META_FILE = ".metadata.json"


def get_dataset_metadata(dataset_id: str) -> dict | None:
    """Get metadata for a dataset if it exists."""
    meta_file = dataset_dir(dataset_id) / META_FILE
    if meta_file.exists():
        try:
            meta = json.loads(meta_file.read_text())
        except (json.JSONDecodeError, OSError):
            return None
        return meta if isinstance(meta, dict) else None
    return None


def save_dataset_metadata(dataset_id: str, metadata: dict) -> None:
    meta_file = dataset_dir(dataset_id) / META_FILE
    meta_file.write_text(json.dumps(metadata))


def list_datasets() -> list[dict]:
    """Metadata of every stored dataset, oldest upload first."""
    out: list[dict] = []
    if not settings.DATA_DIR.exists():
        return out
    for subdir in settings.DATA_DIR.iterdir():
        if not subdir.is_dir() or not dataset_exists(subdir.name):
            continue
        meta = get_dataset_metadata(subdir.name) or {}
        out.append(
            {
                "dataset_id": subdir.name,
                "display_name": meta.get("display_name") or subdir.name,
                "format": meta.get("format"),
                "n_rows": meta.get("n_rows"),
                "n_cols": meta.get("n_cols"),
                "uploaded_at": meta.get("uploaded_at"),
            }
        )
    out.sort(key=lambda m: m["uploaded_at"] or "")
    return out


def latest_dataset_id() -> str | None:
    datasets = list_datasets()
    return datasets[-1]["dataset_id"] if datasets else None


def unique_display_name(base_name: str) -> str:
    """'file.csv', then 'file (1).csv', 'file (2).csv', ... across stored datasets."""
    taken = {m["display_name"] for m in list_datasets()}
    if base_name not in taken:
        return base_name
    stem, ext = re.match(r"^(.+?)(\.[^.]+)?$", base_name).groups()
    for n in count(1):
        candidate = f"{stem} ({n}){ext or ''}"
        if candidate not in taken:
            return candidate
