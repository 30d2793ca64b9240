"""Pytest configuration and shared fixtures."""
import os

os.environ.setdefault("ENVIRONMENT", "test")

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from tabload.core.config import settings
from tabload.domain.workspace import Workspace, workspace as global_workspace


@pytest.fixture
def sample_frame():
    """Small mixed-type frame with row names and a missing value."""
    return pd.DataFrame(
        {
            "speed": [4, 7, 8],
            "dist": [2.0, None, 16.0],
            "label": ["slow", "mid", "fast"],
        },
        index=["a", "b", "c"],
    )


@pytest.fixture
def write_text(tmp_path):
    """Write text to a file under tmp_path and return its path."""
    def _write(name: str, content: str):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def cars_csv(write_text):
    return write_text("cars.csv", "speed,dist\n4,2\n4,10\n7,4\n7,22\n8,16\n")


@pytest.fixture
def fresh_workspace():
    return Workspace()


@pytest.fixture(autouse=True)
def clean_global_workspace():
    """Each test starts and ends with an empty global workspace."""
    global_workspace.clear()
    yield global_workspace
    global_workspace.clear()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the API's data directory at tmp_path."""
    monkeypatch.setattr(settings, "data_dir", tmp_path)
    return tmp_path


@pytest.fixture
def test_client():
    """FastAPI test client."""
    from main import app
    return TestClient(app)
