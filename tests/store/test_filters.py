from haiku.tree.store.filters import (
    ArrayContains,
    FieldEquals,
    FieldIn,
    combine_filters,
)


def test_field_equals():
    assert FieldEquals("parent_id", "abc").to_sql() == "parent_id = 'abc'"


def test_field_equals_none_is_null_check():
    assert FieldEquals("parent_id", None).to_sql() == "parent_id IS NULL"


def test_field_equals_escapes_quotes():
    assert FieldEquals("title", "O'Reilly").to_sql() == "title = 'O''Reilly'"


def test_field_in():
    predicate = FieldIn("id", ["a", "b"])
    assert predicate.values == ("a", "b")
    assert predicate.to_sql() == "id IN ('a', 'b')"
    assert predicate.matches_nothing is False


def test_field_in_empty_matches_nothing():
    assert FieldIn("id", []).matches_nothing is True


def test_array_contains():
    predicate = ArrayContains("ancestor_ids", "abc")
    assert predicate.to_sql() == "array_has_any(ancestor_ids, ['abc'])"


def test_combine_filters():
    assert combine_filters() is None
    assert combine_filters(FieldEquals("id", "a")) == "id = 'a'"
    assert (
        combine_filters(FieldEquals("id", "a"), FieldEquals("parent_id", None))
        == "(id = 'a') AND (parent_id IS NULL)"
    )
