"""FastAPI routes for browsing datasets, previewing files and managing snapshots.

Local files are confined to ``settings.data_dir``; URLs are fetched as-is.
Library errors are mapped to HTTP status codes here and nowhere else.
"""
from typing import List

import pandas as pd
import requests
from fastapi import APIRouter, HTTPException

from tabload.core.config import settings
from tabload.core.errors import DatasetNotFoundError, SnapshotFormatError
from tabload.core.logging import get_logger, LogTimer
from tabload.datasets import data, get_dataset_info, list_datasets, load_dataset
from tabload.domain.models import (
    DatasetInfo,
    LoadRequest,
    ReadRequest,
    SaveRequest,
    TablePreview,
    WorkspaceObject,
)
from tabload.domain.workspace import workspace
from tabload.infrastructure import snapshots
from tabload.infrastructure.delimited import READERS
from tabload.infrastructure.sources import is_url
from tabload.services.inspect import structure, to_records

logger = get_logger(__name__)
router = APIRouter()


def _data_path(name: str):
    try:
        return settings.resolve_data_path(name)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc))


def _preview_rows(rows: int) -> int:
    return min(rows, settings.max_preview_rows)


# -----------------
# DATASETS
# -----------------

@router.get("/datasets", response_model=List[DatasetInfo])
def get_datasets():
    """List the bundled datasets."""
    return list_datasets()


@router.get("/datasets/{name}", response_model=TablePreview)
def get_dataset(name: str, rows: int = 6):
    """Structure and first rows of a bundled dataset."""
    with LogTimer(logger, f"dataset_preview:{name}", dataset=name):
        try:
            info = get_dataset_info(name)
        except DatasetNotFoundError as exc:
            raise HTTPException(
                status_code=404,
                detail={"message": str(exc), "suggestions": exc.suggestions},
            )
        df = load_dataset(info.name)
        return TablePreview(
            source=f"dataset:{info.name}",
            summary=structure(df),
            records=to_records(df, limit=_preview_rows(rows)),
        )


# -----------------
# DELIMITED FILES
# -----------------

@router.post("/tables/preview", response_model=TablePreview)
def preview_table(req: ReadRequest):
    """Parse a delimited file and return its structure and first rows.

    Example:
        POST /tables/preview
        {"source": "cars.csv", "reader": "csv", "options": {"nrows": 10}}
    """
    reader = READERS[req.reader]
    source = req.source if is_url(req.source) else _data_path(req.source)

    with LogTimer(logger, "table_preview", source=req.source, reader=req.reader):
        try:
            df = reader(source, **req.options)
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail=f"File not found: {req.source}")
        except TypeError as exc:
            # Unknown keyword in options
            raise HTTPException(status_code=400, detail=str(exc))
        except LookupError as exc:
            # Unknown encoding
            raise HTTPException(status_code=400, detail=str(exc))
        except requests.HTTPError as exc:
            upstream = exc.response.status_code if exc.response is not None else None
            if upstream == 404:
                raise HTTPException(status_code=404, detail=f"Remote file not found: {req.source}")
            raise HTTPException(status_code=502, detail=f"Could not fetch {req.source}: {exc}")
        except requests.RequestException as exc:
            raise HTTPException(status_code=502, detail=f"Could not fetch {req.source}: {exc}")
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=f"Could not parse {req.source}: {exc}")

    return TablePreview(
        source=req.source,
        summary=structure(df),
        records=to_records(df, limit=_preview_rows(req.rows)),
    )


# -----------------
# WORKSPACE
# -----------------

@router.get("/workspace", response_model=List[WorkspaceObject])
def list_workspace():
    """Objects currently held in the workspace."""
    objects = []
    for name in workspace.ls():
        value = workspace[name]
        shape = getattr(value, "shape", None)
        objects.append(WorkspaceObject(
            name=name,
            type=type(value).__name__,
            shape=[int(s) for s in shape] if shape is not None else None,
        ))
    return objects


@router.post("/workspace/datasets/{name}")
def attach_dataset(name: str):
    """Load a bundled dataset into the workspace."""
    try:
        loaded = data(name)
    except DatasetNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail={"message": str(exc), "suggestions": exc.suggestions},
        )
    return {"loaded": loaded}


@router.delete("/workspace/{name}")
def remove_object(name: str):
    try:
        workspace.rm(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"object '{name}' not found")
    return {"removed": name}


# -----------------
# SNAPSHOTS
# -----------------

@router.post("/snapshots/save")
def save_snapshot(req: SaveRequest):
    """Write workspace objects to a snapshot inside the data directory."""
    path = _data_path(req.file)
    try:
        if req.names is None:
            saved = snapshots.save_image(path, compress=req.compress)
        else:
            saved = snapshots.save(path, *req.names, compress=req.compress)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return {"file": req.file, "saved": saved}


@router.post("/snapshots/load")
def load_snapshot(req: LoadRequest):
    """Restore a workspace snapshot from the data directory."""
    path = _data_path(req.file)
    try:
        restored = snapshots.load(path)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"File not found: {req.file}")
    except SnapshotFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return {"file": req.file, "loaded": restored}
