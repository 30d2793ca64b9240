"""Integration tests for API routes."""
import inspect
from unittest.mock import Mock, patch

import pytest
import requests
from fastapi import status
from fastapi.routing import APIRoute

from tabload.api.routes import router
from tabload.infrastructure import sources


class TestServiceRoutes:

    def test_root(self, test_client):
        response = test_client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["service"] == "tabload"
        assert "X-Request-ID" in response.headers

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["checks"]["datasets"] == 5


class TestDatasetRoutes:

    def test_list(self, test_client):
        response = test_client.get("/datasets")

        assert response.status_code == status.HTTP_200_OK
        names = [d["name"] for d in response.json()]
        assert "mtcars" in names
        assert len(names) == 5

    def test_preview(self, test_client):
        response = test_client.get("/datasets/mtcars", params={"rows": 3})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["source"] == "dataset:mtcars"
        assert data["summary"]["rows"] == 32
        assert data["summary"]["has_row_names"] is True
        assert len(data["records"]) == 3
        assert data["records"][0]["_row"] == "Mazda RX4"

    def test_unknown_dataset(self, test_client):
        response = test_client.get("/datasets/mtcar")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "mtcars" in response.json()["detail"]["suggestions"]


class TestTablePreviewRoutes:

    def test_preview_csv(self, test_client, data_dir):
        (data_dir / "cars.csv").write_text("speed,dist\n4,2\n4,10\n7,4\n", encoding="utf-8")

        response = test_client.post("/tables/preview", json={"source": "cars.csv", "rows": 2})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["summary"]["rows"] == 3
        assert data["records"] == [{"speed": 4, "dist": 2}, {"speed": 4, "dist": 10}]

    def test_preview_with_reader_options(self, test_client, data_dir):
        (data_dir / "plain.txt").write_text("1 2\n3 4\n", encoding="utf-8")

        response = test_client.post(
            "/tables/preview",
            json={"source": "plain.txt", "reader": "table", "options": {"nrows": 1}},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["records"] == [{"V1": 1, "V2": 2}]

    def test_outside_data_dir_forbidden(self, test_client, data_dir):
        response = test_client.post("/tables/preview", json={"source": "../elsewhere.csv"})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_missing_file(self, test_client, data_dir):
        response = test_client.post("/tables/preview", json={"source": "nope.csv"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_parse_error(self, test_client, data_dir):
        (data_dir / "ragged.csv").write_text("a,b\n1,2\n3,4,5,6\n", encoding="utf-8")

        response = test_client.post("/tables/preview", json={"source": "ragged.csv"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_unknown_reader(self, test_client, data_dir):
        response = test_client.post("/tables/preview", json={"source": "a.csv", "reader": "excel"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_unknown_option(self, test_client, data_dir):
        (data_dir / "a.csv").write_text("a\n1\n", encoding="utf-8")

        response = test_client.post("/tables/preview", json={"source": "a.csv", "options": {"bogus": 1}})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestWorkspaceAndSnapshotRoutes:

    def test_dataset_into_workspace(self, test_client):
        response = test_client.post("/workspace/datasets/cars")
        assert response.json() == {"loaded": ["cars"]}

        listing = test_client.get("/workspace").json()
        assert listing == [{"name": "cars", "type": "DataFrame", "shape": [50, 2]}]

    def test_unknown_dataset_into_workspace(self, test_client):
        response = test_client.post("/workspace/datasets/nothing")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_save_remove_and_load(self, test_client, data_dir):
        test_client.post("/workspace/datasets/women")

        saved = test_client.post("/snapshots/save", json={"file": "session.RData"})
        assert saved.status_code == status.HTTP_200_OK
        assert saved.json()["saved"] == ["women"]
        assert (data_dir / "session.RData").exists()

        removed = test_client.delete("/workspace/women")
        assert removed.status_code == status.HTTP_200_OK
        assert test_client.get("/workspace").json() == []

        loaded = test_client.post("/snapshots/load", json={"file": "session.RData"})
        assert loaded.json()["loaded"] == ["women"]
        assert [o["name"] for o in test_client.get("/workspace").json()] == ["women"]

    def test_save_unknown_name(self, test_client, data_dir):
        response = test_client.post("/snapshots/save", json={"file": "x.RData", "names": ["ghost"]})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_load_not_a_snapshot(self, test_client, data_dir):
        (data_dir / "table.csv").write_text("a,b\n1,2\n", encoding="utf-8")

        response = test_client.post("/snapshots/load", json={"file": "table.csv"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_load_missing(self, test_client, data_dir):
        response = test_client.post("/snapshots/load", json={"file": "missing.RData"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_remove_unknown(self, test_client):
        response = test_client.delete("/workspace/ghost")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize("content", ["ID,value\n1,2\n", "city,pop\nx,1\n"])
    def test_load_csv_that_starts_like_a_pickle(self, test_client, data_dir, content):
        (data_dir / "ids.csv").write_text(content, encoding="utf-8")

        response = test_client.post("/snapshots/load", json={"file": "ids.csv"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestRemotePreviewRoutes:

    @pytest.fixture(autouse=True)
    def no_cache(self):
        with patch.object(sources, "_get_cache", return_value=None):
            yield

    @staticmethod
    def _http_error(status_code: int):
        response = Mock()
        response.status_code = status_code
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=response
        )
        return response

    def test_remote_csv(self, test_client):
        response = Mock()
        response.content = b"a,b\n1,2\n"
        response.raise_for_status.return_value = None
        with patch("tabload.infrastructure.sources.requests.get", return_value=response):
            result = test_client.post("/tables/preview", json={"source": "https://example.com/a.csv"})

        assert result.status_code == status.HTTP_200_OK
        assert result.json()["records"] == [{"a": 1, "b": 2}]

    def test_remote_not_found(self, test_client):
        with patch("tabload.infrastructure.sources.requests.get", return_value=self._http_error(404)):
            response = test_client.post("/tables/preview", json={"source": "https://example.com/missing.csv"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_remote_server_error(self, test_client):
        with patch("tabload.infrastructure.sources.requests.get", return_value=self._http_error(503)):
            response = test_client.post("/tables/preview", json={"source": "https://example.com/a.csv"})

        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    @pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
    def test_remote_unreachable(self, test_client, error):
        with patch("tabload.infrastructure.sources.requests.get", side_effect=error):
            response = test_client.post("/tables/preview", json={"source": "https://example.com/a.csv"})

        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    def test_unknown_encoding(self, test_client, data_dir):
        (data_dir / "a.csv").write_text("a\n1\n", encoding="utf-8")

        response = test_client.post(
            "/tables/preview",
            json={"source": "a.csv", "options": {"encoding": "no-such-codec"}},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestRouteHandlers:

    def test_handlers_run_in_threadpool(self):
        """Handlers do blocking I/O, so none of them is a coroutine."""
        endpoints = [r.endpoint for r in router.routes if isinstance(r, APIRoute)]

        assert endpoints
        assert not any(inspect.iscoroutinefunction(e) for e in endpoints)
