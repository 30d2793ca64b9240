"""Domain models describing datasets, table summaries and API payloads."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class DatasetInfo(BaseModel):
    """A bundled sample dataset.

    Describes one entry of the dataset registry.
    """
    name: str
    title: str
    file: str
    rows: int = Field(ge=0)
    columns: int = Field(ge=0)
    has_row_names: bool = False
    factors: List[str] = Field(default_factory=list)
    description: str = ""

    class Config:
        json_schema_extra = {
            "example": {
                "name": "cars",
                "title": "Speed and Stopping Distances of Cars",
                "file": "cars.csv",
                "rows": 50,
                "columns": 2,
                "has_row_names": False,
            }
        }


class ColumnSummary(BaseModel):
    """Structure of one column: type, missing values and a few samples."""
    name: str
    dtype: str
    missing: int = Field(ge=0)
    sample: List[Any] = Field(default_factory=list)
    levels: Optional[List[str]] = None


class TableSummary(BaseModel):
    """Compact structure of a DataFrame."""
    rows: int
    columns: int
    has_row_names: bool = False
    column_summaries: List[ColumnSummary] = Field(default_factory=list)


class TablePreview(BaseModel):
    """Structure plus the first rows of a table."""
    source: str
    summary: TableSummary
    records: List[Dict[str, Any]]


class ReadRequest(BaseModel):
    """Request body for previewing a delimited file."""
    source: str
    reader: str = Field(default="csv", pattern="^(table|csv|csv2|delim|delim2|tidy_delim|tidy_csv|tidy_tsv)$")
    options: Dict[str, Any] = Field(default_factory=dict)
    rows: int = Field(default=6, ge=0)


class SaveRequest(BaseModel):
    """Request body for writing a workspace snapshot."""
    file: str
    names: Optional[List[str]] = None  # None saves the whole workspace
    compress: bool | str = True


class LoadRequest(BaseModel):
    """Request body for restoring a workspace snapshot."""
    file: str


class WorkspaceObject(BaseModel):
    name: str
    type: str
    shape: Optional[List[int]] = None
