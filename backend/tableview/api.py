import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse, Response
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from .config import settings
from .decoders import DECODERS, decode
from .datasets.dedup import get_content_hash_bytes, is_same_upload, write_content_hash_file
from .datasets.metadata import (
    get_dataset_metadata,
    list_datasets,
    save_dataset_metadata,
    unique_display_name,
)
from .datasets.store import (
    dataset_dir,
    dataset_exists,
    delete_dataset,
    read_dataset,
    rows_path,
    write_dataset,
)
from .engine import dataset as dataset_mod
from .engine.dataset import Dataset
from .engine.exporter import XLSX_MEDIA_TYPE
from .engine.sorting import SortDirection, SortSpec
from .engine.view import ViewController
from .engine.widths import column_widths
from .errors import EmptyDatasetError, ParseError, api_error

logger = logging.getLogger(__name__)

router = APIRouter()  # router for endpoints


class SortModel(BaseModel):
    column: str
    direction: SortDirection = SortDirection.ASC


class ViewRequest(BaseModel):
    filters: dict[str, str] = Field(default_factory=dict)
    sort: SortModel | None = None
    page: int = 1
    page_size: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)


def _load_stored(dataset_id: str) -> Dataset:
    if not dataset_exists(dataset_id):
        raise api_error(404, "DATASET_NOT_FOUND", "Dataset not found")
    try:
        return read_dataset(rows_path(dataset_id))
    except (OSError, ValueError) as e:
        raise api_error(500, "STORE_FAILED", f"Failed to read dataset: {e}")


def _controller_for(ds: Dataset, req: ViewRequest) -> ViewController:
    """Replay a stateless request onto a fresh controller: filters, sort, then page."""
    view = ViewController(
        page_size=req.page_size,
        choices_max=settings.FILTER_CHOICES_MAX,
        width_scale=settings.WIDTH_SCALE,
        width_min=settings.WIDTH_MIN,
        width_max=settings.WIDTH_MAX,
    )
    view.load_dataset(ds)
    for column, value in req.filters.items():
        view.set_filter(column, value)
    if req.sort is not None and ds.has_column(req.sort.column):
        view.set_sort(SortSpec(column=req.sort.column, direction=req.sort.direction))
    view.set_page(req.page)
    return view


# upload data endpoint
@router.post("/upload")
async def upload(file: UploadFile = File(...)):
    name = Path((file.filename or "upload").strip() or "upload").name
    if not name.lower().endswith(tuple(f".{ext}" for ext in DECODERS)):
        raise api_error(
            400, "BAD_EXTENSION", "Only .csv, .json, .xlsx or .parquet allowed"
        )

    contents = await file.read()
    if len(contents) == 0:
        raise api_error(400, "EMPTY_FILE", "File is empty")
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise api_error(
            413,
            "FILE_TOO_LARGE",
            f"File too large (>{settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB)",
        )

    # same bytes -> same dataset id
    content_hash = get_content_hash_bytes(contents)
    dataset_id = content_hash
    updir = dataset_dir(dataset_id)

    if is_same_upload(updir, content_hash) and dataset_exists(dataset_id):
        ds = _load_stored(dataset_id)
        meta = get_dataset_metadata(dataset_id) or {}
        return JSONResponse(
            jsonable_encoder(
                _upload_body(dataset_id, meta.get("display_name") or name, ds, True)
            )
        )

    try:
        rows = decode(name, contents)
        ds = dataset_mod.load(rows)
    except ParseError as e:
        raise api_error(400, "PARSING_FAILED", f"Could not parse file: {e.reason}")
    except EmptyDatasetError as e:
        raise api_error(422, "EMPTY_DATASET", str(e))

    display_name = unique_display_name(name)
    try:
        updir.mkdir(parents=True, exist_ok=True)
        write_dataset(ds, rows_path(dataset_id))
        write_content_hash_file(updir, content_hash)
        save_dataset_metadata(
            dataset_id,
            {
                "display_name": display_name,
                "format": Path(name).suffix.lower().lstrip("."),
                "n_rows": len(ds),
                "n_cols": len(ds.columns),
                "uploaded_at": datetime.now(timezone.utc).isoformat(),
            },
        )
    except OSError as e:
        shutil.rmtree(updir, ignore_errors=True)
        raise api_error(500, "STORE_FAILED", f"Failed to store upload: {e}")

    logger.info("Stored %s as %s (%d rows)", display_name, dataset_id, len(ds))
    return JSONResponse(
        jsonable_encoder(_upload_body(dataset_id, display_name, ds, False))
    )


def _upload_body(dataset_id: str, display_name: str, ds: Dataset, already_present: bool) -> dict:
    widths = column_widths(
        ds,
        scale=settings.WIDTH_SCALE,
        min_width=settings.WIDTH_MIN,
        max_width=settings.WIDTH_MAX,
    )
    return {
        "dataset_id": dataset_id,  # dataset reference id
        "display_name": display_name,
        "n_rows": len(ds),
        "n_cols": len(ds.columns),
        "columns": list(ds.columns),
        "widths": widths,
        "sample": list(ds.rows[: settings.SAMPLE_ROWS]),  # sample of table
        "already_present": already_present,
    }


@router.get("/datasets")
async def datasets():
    return JSONResponse(jsonable_encoder({"datasets": list_datasets()}))


@router.delete("/datasets/{dataset_id}")
async def remove_dataset(dataset_id: str):
    if not delete_dataset(dataset_id):
        raise api_error(404, "DATASET_NOT_FOUND", "Dataset not found")
    return JSONResponse({"deleted": dataset_id})


@router.post("/datasets/{dataset_id}/view")
async def view_dataset(dataset_id: str, req: ViewRequest):
    ds = _load_stored(dataset_id)
    view = _controller_for(ds, req)
    page = view.current_page()
    return JSONResponse(
        jsonable_encoder(
            {
                "dataset_id": dataset_id,
                "columns": list(view.columns),
                "widths": view.widths,
                "filter_choices": view.filter_choices,
                "rows": page.page_rows,
                "page": page.current_page,
                "page_size": view.page_state.page_size,
                "total_pages": page.total_pages,
                "n_rows": len(ds),
                "n_filtered": len(view.filtered_rows),
                "filters": view.filters,
                "sort": (
                    {"column": view.sort.column, "direction": view.sort.direction.value}
                    if view.sort.active
                    else None
                ),
            }
        )
    )


@router.post("/datasets/{dataset_id}/export")
async def export_dataset(dataset_id: str, req: ViewRequest):
    ds = _load_stored(dataset_id)
    view = _controller_for(ds, req)
    data = view.export()
    logger.info("Exported %d rows of %s", len(view.filtered_rows), dataset_id)
    return Response(
        content=data,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{settings.EXPORT_FILENAME}"'
        },
    )
