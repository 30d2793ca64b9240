"""tabload: load tabular data from delimited text, binary snapshots and bundled datasets."""
from tabload.datasets import data, list_datasets, load_dataset
from tabload.domain.workspace import Workspace, workspace
from tabload.infrastructure.delimited import (
    read_csv,
    read_csv2,
    read_csv_tidy,
    read_delim,
    read_delim2,
    read_delim_tidy,
    read_table,
    read_tsv_tidy,
    write_csv,
    write_table,
)
from tabload.infrastructure.snapshots import load, read_rds, save, save_image, save_rds
from tabload.services.inspect import dim, head, structure, tail

__version__ = "1.0.0"

__all__ = [
    "Workspace",
    "data",
    "dim",
    "head",
    "list_datasets",
    "load",
    "load_dataset",
    "read_csv",
    "read_csv2",
    "read_csv_tidy",
    "read_delim",
    "read_delim2",
    "read_delim_tidy",
    "read_rds",
    "read_table",
    "read_tsv_tidy",
    "save",
    "save_image",
    "save_rds",
    "structure",
    "tail",
    "workspace",
    "write_csv",
    "write_table",
]
