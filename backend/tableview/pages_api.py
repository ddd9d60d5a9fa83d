from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .datasets.metadata import latest_dataset_id
from .datasets.store import dataset_exists, read_dataset, rows_path
from .engine.pager import PageState, normalize_page_size, paginate
from .errors import api_error

router = APIRouter(prefix="/api")


@router.get("/csv-data")
async def csv_data(
    dataset_id: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(0),
):
    """Server-side pages in the {data, totalPages} shape; limit=0 returns every row."""
    if dataset_id is None:
        dataset_id = latest_dataset_id()
    if dataset_id is None or not dataset_exists(dataset_id):
        raise api_error(404, "DATASET_NOT_FOUND", "Dataset not found")

    try:
        ds = read_dataset(rows_path(dataset_id))
    except (OSError, ValueError) as e:
        raise api_error(500, "STORE_FAILED", f"Failed to read dataset: {e}")

    size = normalize_page_size(limit)
    result = paginate(ds.rows, PageState(page_size=size, current_page=page))
    start = (result.current_page - 1) * size
    data = [
        {"_id": f"{dataset_id}:{start + i}", "data": row}
        for i, row in enumerate(result.page_rows)
    ]
    return JSONResponse(
        jsonable_encoder(
            {
                "data": data,
                "totalPages": result.total_pages,
                "page": result.current_page,
            }
        )
    )
