"""Bundled sample datasets."""
from tabload.datasets.registry import (
    REGISTRY,
    data,
    get_dataset_info,
    list_datasets,
    load_dataset,
    suggest_datasets,
)

__all__ = [
    "REGISTRY",
    "data",
    "get_dataset_info",
    "list_datasets",
    "load_dataset",
    "suggest_datasets",
]
