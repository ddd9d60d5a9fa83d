from __future__ import annotations

from pathlib import Path
import xxhash

HASH_FILE = ".content_hash"


def get_content_hash_bytes(contents: bytes) -> str:
    """xxhash of the uploaded bytes; doubles as the dataset id."""
    return xxhash.xxh64(contents).hexdigest()


def read_content_hash(dataset_dir: Path) -> str | None:
    hash_file = dataset_dir / HASH_FILE
    if not hash_file.exists():
        return None
    return hash_file.read_text().strip() or None


def is_same_upload(dataset_dir: Path, content_hash: str) -> bool:
    """True when the directory already holds a dataset decoded from these bytes."""
    return dataset_dir.is_dir() and read_content_hash(dataset_dir) == content_hash


def write_content_hash_file(dataset_dir: Path, content_hash: str) -> None:
    (dataset_dir / HASH_FILE).write_text(content_hash)
