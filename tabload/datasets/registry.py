"""Registry of the sample datasets shipped with the package.

Datasets are small CSV files under ``tabload/datasets/data``. Loading is
cached per process; every caller receives its own copy.
"""
from difflib import get_close_matches
from functools import lru_cache
from importlib import resources
from typing import Dict, List, Optional

import pandas as pd

from tabload.core.errors import DatasetNotFoundError
from tabload.core.logging import get_logger, LogTimer
from tabload.domain.models import DatasetInfo
from tabload.domain.workspace import Workspace, workspace as global_workspace
from tabload.infrastructure.delimited import read_csv

logger = get_logger(__name__)

DATA_PACKAGE = "tabload.datasets"


REGISTRY: Dict[str, DatasetInfo] = {
    info.name: info
    for info in (
        DatasetInfo(
            name="mtcars",
            title="Motor Trend Car Road Tests",
            file="mtcars.csv",
            rows=32,
            columns=11,
            has_row_names=True,
            description="Fuel consumption and 10 aspects of design and performance for 32 automobiles (1973-74 models).",
        ),
        DatasetInfo(
            name="cars",
            title="Speed and Stopping Distances of Cars",
            file="cars.csv",
            rows=50,
            columns=2,
            description="Speed of cars (mph) and the distances taken to stop (ft), recorded in the 1920s.",
        ),
        DatasetInfo(
            name="women",
            title="Average Heights and Weights for American Women",
            file="women.csv",
            rows=15,
            columns=2,
            description="Height (in) and weight (lbs) for American women aged 30-39.",
        ),
        DatasetInfo(
            name="PlantGrowth",
            title="Results from an Experiment on Plant Growth",
            file="PlantGrowth.csv",
            rows=30,
            columns=2,
            factors=["group"],
            description="Dried plant weights under a control and two treatment conditions.",
        ),
        DatasetInfo(
            name="iris",
            title="Edgar Anderson's Iris Data",
            file="iris.csv",
            rows=150,
            columns=5,
            factors=["Species"],
            description="Sepal and petal measurements (cm) for 50 flowers from each of 3 iris species.",
        ),
    )
}


def list_datasets() -> List[DatasetInfo]:
    """All bundled datasets, sorted by name."""
    return [REGISTRY[name] for name in sorted(REGISTRY, key=str.lower)]


def get_dataset_info(name: str) -> DatasetInfo:
    """Registry entry for ``name``.

    Raises:
        DatasetNotFoundError: With close-match suggestions when unknown
    """
    info = REGISTRY.get(name)
    if info is None:
        raise DatasetNotFoundError(name, suggest_datasets(name))
    return info


def suggest_datasets(name: str, n: int = 3, cutoff: float = 0.6) -> List[str]:
    """Closest dataset names, compared case-insensitively.

    Example:
        >>> suggest_datasets("mtcar")
        ['mtcars']
        >>> suggest_datasets("Iris")
        ['iris']
    """
    lowered = {key.lower(): key for key in REGISTRY}
    matches = get_close_matches(name.lower(), list(lowered), n=n, cutoff=cutoff)
    return [lowered[m] for m in matches]


@lru_cache(maxsize=None)
def _load_cached(name: str) -> pd.DataFrame:
    info = REGISTRY[name]
    resource = resources.files(DATA_PACKAGE).joinpath("data").joinpath(info.file)
    with LogTimer(logger, "load_dataset", dataset=name):
        with resource.open("rb") as fh:
            df = read_csv(fh, row_names=1 if info.has_row_names else None)
        for col in info.factors:
            df[col] = df[col].astype("category")
    return df


def load_dataset(name: str) -> pd.DataFrame:
    """Return a fresh copy of a bundled dataset.

    Raises:
        DatasetNotFoundError: If ``name`` is not in the registry
    """
    get_dataset_info(name)
    return _load_cached(name).copy()


def data(*names: str, workspace: Optional[Workspace] = None):
    """Load bundled datasets into a workspace.

    With no names, returns the registry listing instead.

    Returns:
        The names loaded, or the list of ``DatasetInfo`` records.

    Example:
        >>> data("mtcars", "iris")
        ['mtcars', 'iris']
        >>> workspace["mtcars"].shape
        (32, 11)
    """
    if not names:
        return list_datasets()

    # All names must exist before any is assigned
    for name in names:
        get_dataset_info(name)

    ws = workspace if workspace is not None else global_workspace
    for name in names:
        ws[name] = load_dataset(name)
        logger.debug(f"Dataset {name} assigned in workspace")
    return list(names)
