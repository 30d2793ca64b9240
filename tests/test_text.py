"""Unit tests for column name repair."""
from tabload.utils.text import make_names, make_unique, tidy_unique


class TestMakeNames:

    def test_invalid_characters_become_dots(self):
        assert make_names(["my col", "a-b", "x/y"]) == ["my.col", "a.b", "x.y"]

    def test_prefix_for_bad_leading_characters(self):
        assert make_names(["1st", "_x", ".5a", ""]) == ["X1st", "X_x", "X.5a", "X"]

    def test_valid_names_untouched(self):
        assert make_names(["Sepal.Length", ".hidden", "x_1"]) == ["Sepal.Length", ".hidden", "x_1"]

    def test_reserved_words_get_trailing_dot(self):
        assert make_names(["if", "TRUE", "NA", "function"]) == ["if.", "TRUE.", "NA.", "function."]

    def test_duplicates_made_unique(self):
        assert make_names(["a", "a", "a"]) == ["a", "a.1", "a.2"]

    def test_unique_off(self):
        assert make_names(["a", "a"], unique=False) == ["a", "a"]

    def test_none_treated_as_empty(self):
        assert make_names([None]) == ["X"]


class TestMakeUnique:

    def test_suffixes_skip_existing_names(self):
        assert make_unique(["a", "a", "a.1"]) == ["a", "a.2", "a.1"]

    def test_custom_separator(self):
        assert make_unique(["a", "a"], sep="_") == ["a", "a_1"]

    def test_already_unique(self):
        assert make_unique(["x", "y"]) == ["x", "y"]


class TestTidyUnique:

    def test_blank_and_repeated(self):
        assert tidy_unique(["x", "", "x"]) == ["x...1", "...2", "x...3"]

    def test_verbatim_otherwise(self):
        assert tidy_unique(["first name", "2nd"]) == ["first name", "2nd"]
