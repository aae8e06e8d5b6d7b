"""Tests for text-level SOQL helpers."""

import pytest

from apexlens.antipatterns.utils.soql_text import (
    exclude_system_fields,
    extract_fields_text,
    has_limit_clause_text,
    has_nested_queries,
    has_where_clause_text,
    mask_subqueries,
    remove_unused_fields,
)


def test_mask_subqueries_keeps_offsets():
    text = "SELECT Id, (SELECT Id FROM Contacts WHERE X = 1) FROM Account"
    masked = mask_subqueries(text)

    assert len(masked) == len(text)
    assert "Contacts" not in masked
    assert masked.endswith("FROM Account")


def test_where_and_limit_on_outer_query_only():
    text = "SELECT Id, (SELECT Id FROM Contacts WHERE X = 1 LIMIT 2) FROM Account"
    assert not has_where_clause_text(text)
    assert not has_limit_clause_text(text)
    assert has_where_clause_text(text + " WHERE Name = 'a'")


def test_keyword_in_string_literal():
    assert not has_limit_clause_text("SELECT Id FROM Account WHERE Name = 'no limit'")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("SELECT Id FROM Account", False),
        ("SELECT Id, (SELECT Id FROM Contacts) FROM Account", True),
        ("SELECT Id FROM Account WHERE Name = 'SELECT x FROM y'", False),
    ],
)
def test_has_nested_queries(text, expected):
    assert has_nested_queries(text) is expected


def test_extract_fields_text():
    text = "SELECT Id, Account.Name, COUNT(Id) cnt, (SELECT Id FROM Contacts) FROM Contact"
    assert extract_fields_text(text) == ["Id", "Account.Name", "cnt"]
    assert extract_fields_text("DELETE everything") == []


def test_exclude_system_fields_any_case():
    assert exclude_system_fields(["ID", "Name", "count()", "COUNT()", "Id"]) == ["Name"]


class TestRemoveUnusedFields:
    def test_keeps_everything_after_from(self):
        fixed = remove_unused_fields(
            "SELECT Id, Name, Phone FROM Account WHERE Name != null ORDER BY Name LIMIT 5",
            ["Phone"],
            ["Id", "Name", "Phone"],
        )
        assert fixed == "SELECT Id, Name FROM Account WHERE Name != null ORDER BY Name LIMIT 5"

    def test_refuses_nested_queries(self):
        query = "SELECT Id, Name, (SELECT Id FROM Contacts) FROM Account"
        assert remove_unused_fields(query, ["Name"], ["Id", "Name"]) == ""

    def test_refuses_removing_every_field(self):
        assert remove_unused_fields("SELECT Name FROM Account", ["Name"], ["Name"]) == ""

    def test_refuses_query_without_from(self):
        assert remove_unused_fields("SELECT Name", ["Name"], ["Id", "Name"]) == ""
