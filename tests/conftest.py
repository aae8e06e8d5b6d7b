"""Shared test fixtures for the apexlens test suite."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from apexlens.runtime.domain.models import ClassRuntimeData, QueryRuntimeData


GGD_IN_LOOP_SOURCE = """public class AccountService {
    public void refresh(List<String> names) {
        for (String name : names) {
            Schema.SObjectType t = Schema.getGlobalDescribe().get(name);
        }
    }

    public Map<String, Schema.SObjectType> describeAll() {
        return Schema.getGlobalDescribe();
    }
}
"""

UNBOUNDED_QUERY_SOURCE = """public class AccountService {
    public List<Account> all() {
        List<Account> accounts = [SELECT Id, Name FROM Account];
        return accounts;
    }

    public Account one(Id accountId) {
        return [SELECT Id FROM Account WHERE Id = :accountId];
    }
}
"""

UNUSED_FIELDS_SOURCE = """public class AccountService {
    public void logNames() {
        List<Account> accounts = [SELECT Id, Name, Industry, Phone FROM Account WHERE Name != null];
        for (Account a : accounts) {
            System.debug(a.Name);
        }
    }
}
"""


@pytest.fixture
def ggd_source():
    """Class with one in-loop and one top-level getGlobalDescribe call."""
    return GGD_IN_LOOP_SOURCE


@pytest.fixture
def unbounded_query_source():
    """Class with one unbounded and one filtered query."""
    return UNBOUNDED_QUERY_SOURCE


@pytest.fixture
def unused_fields_source():
    """Class whose query projects fields that are never read."""
    return UNUSED_FIELDS_SOURCE


@pytest.fixture
def apex_file(tmp_path):
    """Apex class file on disk."""
    file_path = tmp_path / "AccountService.cls"
    file_path.write_text(GGD_IN_LOOP_SOURCE)
    return file_path


@pytest.fixture
def query_runtime_data():
    """Telemetry with a hot query on line 3 of AccountService."""
    return ClassRuntimeData(
        soql_runtime_data=[
            QueryRuntimeData(
                unique_query_identifier="AccountService.cls.3",
                representative_count=25_000,
                total_query_execution_time=1200.0,
            )
        ]
    )


@pytest.fixture
def mock_connection():
    """Org connection returning an empty successful report."""
    connection = MagicMock()
    connection.request = AsyncMock(return_value={"status": "SUCCESS", "message": "", "classData": {}})
    return connection
