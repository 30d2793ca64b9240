"""Unit tests for the bundled dataset registry."""
import pandas as pd
import pytest

from tabload.core.errors import DatasetNotFoundError
from tabload.datasets import (
    REGISTRY,
    data,
    get_dataset_info,
    list_datasets,
    load_dataset,
    suggest_datasets,
)


class TestRegistry:

    def test_list_sorted_case_insensitively(self):
        names = [info.name for info in list_datasets()]
        assert names == ["cars", "iris", "mtcars", "PlantGrowth", "women"]

    @pytest.mark.parametrize("name", sorted(REGISTRY))
    def test_registry_shape_matches_file(self, name):
        info = get_dataset_info(name)
        df = load_dataset(name)

        assert df.shape == (info.rows, info.columns)

    def test_unknown_name_has_suggestions(self):
        with pytest.raises(DatasetNotFoundError) as exc_info:
            get_dataset_info("mtcar")

        assert "mtcars" in exc_info.value.suggestions
        assert "data set 'mtcar' not found" in str(exc_info.value)

    def test_lookup_is_case_sensitive(self):
        with pytest.raises(DatasetNotFoundError) as exc_info:
            load_dataset("Iris")

        assert exc_info.value.suggestions == ["iris"]

    def test_not_found_is_a_key_error(self):
        with pytest.raises(KeyError):
            load_dataset("nothing_like_it")

    def test_suggestions_empty_for_nonsense(self):
        assert suggest_datasets("zzzzzz") == []


class TestLoadDataset:

    def test_mtcars_has_row_names(self):
        df = load_dataset("mtcars")

        assert df.index[0] == "Mazda RX4"
        assert df.index.name is None
        assert list(df.columns)[:3] == ["mpg", "cyl", "disp"]
        assert df["mpg"].mean() == pytest.approx(20.090625)

    def test_iris_species_is_categorical(self):
        df = load_dataset("iris")

        assert isinstance(df["Species"].dtype, pd.CategoricalDtype)
        assert df["Species"].value_counts().to_dict() == {"setosa": 50, "versicolor": 50, "virginica": 50}
        assert list(df.columns[:2]) == ["Sepal.Length", "Sepal.Width"]

    def test_plant_growth_levels(self):
        df = load_dataset("PlantGrowth")
        assert list(df["group"].cat.categories) == ["ctrl", "trt1", "trt2"]

    def test_cars_values(self):
        df = load_dataset("cars")

        assert df["speed"].min() == 4
        assert df["dist"].max() == 120

    def test_returns_independent_copies(self):
        first = load_dataset("women")
        first.loc[0, "height"] = -1

        assert load_dataset("women").loc[0, "height"] == 58


class TestData:

    def test_no_names_lists_registry(self):
        listing = data()
        assert [info.name for info in listing] == [info.name for info in list_datasets()]

    def test_loads_into_workspace(self, fresh_workspace):
        loaded = data("cars", "women", workspace=fresh_workspace)

        assert loaded == ["cars", "women"]
        assert fresh_workspace.ls() == ["cars", "women"]
        assert fresh_workspace["cars"].shape == (50, 2)

    def test_defaults_to_global_workspace(self, clean_global_workspace):
        data("iris")
        assert "iris" in clean_global_workspace

    def test_unknown_name_loads_nothing(self, fresh_workspace):
        with pytest.raises(DatasetNotFoundError):
            data("cars", "carz", workspace=fresh_workspace)

        assert len(fresh_workspace) == 0
