"""Tests for the SOQL unused fields detector."""

from apexlens.antipatterns.detectors import SOQLUnusedFieldsDetector
from apexlens.antipatterns.domain import AntipatternType, Severity


def _detect(body: str, members: str = ""):
    source = "public class C {\n" + members + "    void m() {\n" + body + "\n    }\n}"
    return SOQLUnusedFieldsDetector().detect("C", source)


def test_type():
    assert SOQLUnusedFieldsDetector().get_antipattern_type() == AntipatternType.SOQL_UNUSED_FIELDS


def test_fields_read_through_loop_variable(unused_fields_source):
    detections = SOQLUnusedFieldsDetector().detect("AccountService", unused_fields_source)

    assert len(detections) == 1
    detection = detections[0]
    assert detection.line_number == 3
    assert detection.member_name == "logNames"
    assert detection.severity == Severity.MINOR
    assert detection.snippet_before == "SELECT Id, Name, Industry, Phone FROM Account WHERE Name != null"
    assert detection.type_metadata == {
        "unusedFields": ["Industry", "Phone"],
        "originalFields": ["Id", "Name", "Industry", "Phone"],
        "assignedVariable": "accounts",
        "isInLoop": False,
        "hasNestedQueries": False,
        "usedInLaterQueries": [],
    }


def test_all_fields_used():
    body = """        Account a = [SELECT Id, Name, Phone FROM Account LIMIT 1];
        System.debug(a.Name + a.Phone);"""
    assert _detect(body) == []


def test_written_field_is_not_a_read():
    body = """        List<Account> accounts = [SELECT Id, Name, Phone FROM Account LIMIT 10];
        for (Account a : accounts) {
            a.Phone = '555';
            System.debug(a.Name);
        }
        update accounts;"""
    detections = _detect(body)

    assert len(detections) == 1
    assert detections[0].type_metadata["unusedFields"] == ["Phone"]


def test_dml_only_usage_flags_non_system_fields():
    body = """        List<Account> accounts = [SELECT Id, Name FROM Account LIMIT 10];
        delete accounts;"""
    detections = _detect(body)
    assert detections[0].type_metadata["unusedFields"] == ["Name"]


def test_returned_variable_is_skipped():
    body = """        List<Account> accounts = [SELECT Id, Name, Phone FROM Account LIMIT 10];
        return accounts;"""
    assert _detect(body) == []


def test_class_field_target_is_skipped():
    body = """        accounts = [SELECT Id, Name, Phone FROM Account LIMIT 10];
        System.debug(accounts[0].Name);"""
    assert _detect(body, members="    private List<Account> accounts;\n") == []


def test_complete_usage_is_skipped():
    body = """        List<Account> accounts = [SELECT Id, Name, Phone FROM Account LIMIT 10];
        process(accounts);"""
    assert _detect(body) == []


def test_size_check_is_not_complete_usage():
    body = """        List<Account> accounts = [SELECT Id, Name, Phone FROM Account LIMIT 10];
        if (accounts.size() > 0) {
            System.debug(accounts[0].Name);
        }"""
    detections = _detect(body)
    assert detections[0].type_metadata["unusedFields"] == ["Phone"]


def test_every_non_system_field_unused_is_not_flagged():
    body = """        List<Account> accounts = [SELECT Name, Phone FROM Account LIMIT 10];
        System.debug(accounts.isEmpty());"""
    assert _detect(body) == []


def test_only_system_fields():
    body = """        List<Account> accounts = [SELECT Id FROM Account LIMIT 10];
        delete accounts;"""
    assert _detect(body) == []


def test_unassigned_query_is_skipped():
    body = "        System.debug([SELECT Id, Name FROM Account LIMIT 1]);"
    assert _detect(body) == []


def test_field_bound_in_later_query():
    body = """        List<Account> accs = [SELECT Id, Name, OwnerId, Phone FROM Account LIMIT 1];
        List<Contact> cs = [SELECT Id FROM Contact WHERE OwnerId = :accs[0].OwnerId];
        System.debug(accs[0].Name);"""
    detections = _detect(body)

    assert len(detections) == 1
    metadata = detections[0].type_metadata
    assert metadata["unusedFields"] == ["Phone"]
    assert metadata["usedInLaterQueries"] == ["Id", "OwnerId"]


def test_query_in_loop_is_major():
    body = """        for (Integer i = 0; i < 3; i++) {
            List<Account> accounts = [SELECT Id, Name, Phone FROM Account LIMIT 1];
            System.debug(accounts[0].Name);
        }"""
    detections = _detect(body)

    assert detections[0].severity == Severity.MAJOR
    assert detections[0].type_metadata["isInLoop"] is True


def test_nested_query_metadata():
    body = """        List<Account> accounts = [SELECT Id, Name, Phone, (SELECT Id FROM Contacts) FROM Account LIMIT 5];
        for (Account a : accounts) {
            System.debug(a.Name);
        }"""
    detections = _detect(body)

    assert len(detections) == 1
    assert detections[0].type_metadata["originalFields"] == ["Id", "Name", "Phone"]
    assert detections[0].type_metadata["hasNestedQueries"] is True
