"""Tests for query-result field usage tracking."""

from apexlens.antipatterns.utils import field_usage


def test_strip_comments():
    code = "a.Name; // a.Phone\n/* a.Industry */ b;"
    assert "Phone" not in field_usage.strip_comments(code)
    assert "Industry" not in field_usage.strip_comments(code)


def test_is_returned_is_case_insensitive():
    assert field_usage.is_returned("accounts", "RETURN accounts;")
    assert not field_usage.is_returned("acc", "return accounts;")


class TestUsesCompleteResults:
    def test_passed_as_argument(self):
        assert field_usage.uses_complete_results("accs", "helper(accs);", ["Name"])

    def test_row_only_operations(self):
        code = """
            if (accs != null && !accs.isEmpty()) { System.debug(accs.size()); }
            for (Account a : accs) { }
            update accs;
        """
        assert not field_usage.uses_complete_results("accs", code, ["Name"])

    def test_indexed_element_passed_on(self):
        assert field_usage.uses_complete_results("accs", "save(accs[0]);", ["Name"])

    def test_field_access_alongside_plain_reference(self):
        assert not field_usage.uses_complete_results("accs", "x = accs[0].Name; y(accs);", ["Name"])

    def test_commented_usage_ignored(self):
        assert not field_usage.uses_complete_results("accs", "// helper(accs);", ["Name"])


def test_find_loop_variables():
    code = "for (Account a : accs) {}\nfor(Account other:accs){}"
    assert field_usage.find_loop_variables("accs", code) == ["a", "other"]


class TestFindDirectFieldAccess:
    def test_reads_through_variable_and_loop_variable(self):
        code = "System.debug(accs[0].Name);\nfor (Account a : accs) { x = a.Phone; }"
        used = field_usage.find_direct_field_access("accs", code, ["Name", "Phone", "Industry"])
        assert used == ["Name", "Phone"]

    def test_writes_are_not_reads(self):
        used = field_usage.find_direct_field_access("acc", "acc.Name = 'x';", ["Name"])
        assert used == []

    def test_comparisons_are_reads(self):
        used = field_usage.find_direct_field_access("acc", "if (acc.Name == 'x') {}", ["Name"])
        assert used == ["Name"]

    def test_relationship_path(self):
        used = field_usage.find_direct_field_access("c", "System.debug(c.Account.Name);", ["Account.Name", "Name"])
        assert used == ["Account.Name"]

    def test_case_insensitive_returns_projected_spelling(self):
        used = field_usage.find_direct_field_access("acc", "x = acc.name;", ["Name"])
        assert used == ["Name"]


def test_find_fields_used_in_later_queries():
    later = ["SELECT Id FROM Contact WHERE AccountId = :acc.Id AND Owner.Name = :acc.OwnerId"]
    used = field_usage.find_fields_used_in_later_queries("acc", later, ["OwnerId", "Phone"])
    assert used == ["OwnerId"]
    assert field_usage.find_fields_used_in_later_queries("other", later, ["OwnerId"]) == []
