"""Tests for the JSON tree search filter."""

from clipboard_session.core.json_filter import NO_MATCH, filter_json, scalar_text


class TestScalars:
    """Scalar matching against canonical text."""

    def test_string_match(self):
        assert filter_json("Hello World", "world") == "Hello World"

    def test_string_no_match(self):
        assert filter_json("Hello", "bye") is NO_MATCH

    def test_number_match(self):
        assert filter_json(12345, "234") == 12345

    def test_boolean_and_null_text(self):
        assert scalar_text(True) == "true"
        assert scalar_text(False) == "false"
        assert scalar_text(None) == "null"
        assert filter_json(True, "tru") is True
        assert filter_json(None, "null") is None

    def test_integral_float_text(self):
        assert scalar_text(2.0) == "2"
        assert scalar_text(29.99) == "29.99"

    def test_exponent_text(self):
        assert scalar_text(1e-7) == "1e-7"
        assert scalar_text(2.5e-10) == "2.5e-10"
        assert filter_json({"tiny": 1e-7}, "e-7") == {"tiny": 1e-7}

    def test_no_match_is_falsy(self):
        assert not NO_MATCH
        assert repr(NO_MATCH) == "NO_MATCH"


class TestObjects:
    """Object filtering by key and by value."""

    def test_value_match_drops_other_keys(self):
        value = {"a": "hello", "b": {"c": "world"}}

        assert filter_json(value, "hello") == {"a": "hello"}

    def test_nested_value_match_keeps_path(self):
        value = {"a": "hello", "b": {"c": "world"}}

        assert filter_json(value, "world") == {"b": {"c": "world"}}

    def test_key_match_keeps_original_value(self):
        value = {"profile": {"firstName": "John", "age": 28}, "id": 1}

        result = filter_json(value, "profile")

        assert result == {"profile": {"firstName": "John", "age": 28}}

    def test_key_match_is_case_insensitive(self):
        value = {"firstName": "John", "lastName": "Doe"}

        assert filter_json(value, "FIRST") == {"firstName": "John"}

    def test_key_order_preserved(self):
        value = {"zeta": "x", "alpha": "x", "mid": "y"}

        result = filter_json(value, "x")

        assert list(result.keys()) == ["zeta", "alpha"]

    def test_no_match(self):
        assert filter_json({"a": 1, "b": "two"}, "zzz") is NO_MATCH

    def test_empty_query_returns_original(self):
        value = {"x": 1}

        assert filter_json(value, "") is value


class TestArrays:
    """Array filtering by element and by index."""

    def test_scalar_elements(self):
        assert filter_json([1, 2, 3], "1") == [1]

    def test_objects_in_array(self):
        value = [
            {"title": "Sample Product", "tags": ["electronics"]},
            {"title": "Another Product", "tags": ["accessory"]},
        ]

        result = filter_json(value, "electronics")

        assert result == [{"tags": ["electronics"]}]

    def test_index_only_match_collapses_element(self):
        # Index 1 matches "1" but its value does not
        assert filter_json(["a", "b"], "1") == []

    def test_no_match(self):
        assert filter_json(["a", "b"], "zzz") is NO_MATCH

    def test_order_preserved(self):
        assert filter_json(["xa", "b", "xc"], "x") == ["xa", "xc"]


def test_sample_document_search():
    """Search a realistic nested document."""
    document = {
        "user": {
            "username": "john_doe",
            "profile": {
                "preferences": {
                    "theme": "dark",
                    "notifications": {"email": True, "push": False},
                }
            },
            "roles": ["user", "moderator"],
            "metadata": None,
        }
    }

    result = filter_json(document, "Dark")

    assert result == {"user": {"profile": {"preferences": {"theme": "dark"}}}}


def test_input_not_mutated():
    document = {"a": {"b": "keep", "c": "drop"}}

    filter_json(document, "keep")

    assert document == {"a": {"b": "keep", "c": "drop"}}
