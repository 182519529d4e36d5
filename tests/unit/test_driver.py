"""Unit tests for the host-facing SnowflakeDriver."""

from dataclasses import replace

import pytest

from snowexplorer import SnowflakeDriver
from snowexplorer.errors import MissingParameterError
from snowexplorer.models import CatalogNode, NodeType


TABLE = {"type": "table", "label": "ORDERS", "database": "SALES", "schema": "PUBLIC"}


@pytest.fixture
def driver(credentials, fake_backend):
    return SnowflakeDriver(credentials, conn_id="conn-1", connector_factory=fake_backend)


@pytest.mark.anyio
class TestSnowflakeDriver:
    """Tests for SnowflakeDriver"""

    async def test_query_runs_each_statement(self, driver, fake_backend):
        fake_backend.responses["SELECT 1"] = [{"A": 1}]

        results = await driver.query("SELECT 1;\nSELECT 2;", request_id="req-9")

        assert len(results) == 2
        assert results[0].results == [{"A": 1}]
        assert all(r.conn_id == "conn-1" and r.request_id == "req-9" for r in results)

    async def test_query_reports_errors_as_results(self, driver, fake_backend):
        fake_backend.responses["FROM MISSING"] = RuntimeError(
            "SQL compilation error:\nObject 'MISSING' does not exist or not authorized."
        )

        (result,) = await driver.query("SELECT * FROM MISSING")

        assert result.error
        assert "\n" not in result.messages[-1].message

    async def test_query_with_bindings_sends_one_statement(self, driver, fake_backend):
        fake_backend.responses["FROM ORDERS"] = [{"ID": 7}]

        results = await driver.query("SELECT ID FROM ORDERS WHERE ID = %s", [7], request_id="req-1")

        assert len(results) == 1
        assert results[0].results == [{"ID": 7}]
        assert results[0].request_id == "req-1"
        assert fake_backend.connectors[0].executed[-1] == ("SELECT ID FROM ORDERS WHERE ID = %s", [7])

    async def test_query_with_bindings_is_not_split(self, driver, fake_backend):
        script = "SELECT %s; SELECT 2;"

        results = await driver.query(script, ["a"])

        assert len(results) == 1
        assert results[0].query == script
        assert fake_backend.log[-1] == script

    async def test_query_empty_script_yields_one_result(self, driver, fake_backend):
        (result,) = await driver.query("-- nothing to run\n")

        assert not result.error
        assert result.results == []
        assert fake_backend.connectors == []

    async def test_show_records_pages(self, driver, fake_backend):
        await driver.show_records(TABLE, limit=10, page=2)

        sql = fake_backend.log[-1]
        assert '"SALES"."PUBLIC"."ORDERS"' in sql
        assert "LIMIT 10" in sql
        assert "OFFSET 20" in sql

    async def test_count_records(self, driver, fake_backend):
        fake_backend.responses["COUNT(1)"] = [{"total": 42}]

        assert await driver.count_records(TABLE) == 42

    async def test_count_records_failure(self, driver, fake_backend):
        fake_backend.responses["COUNT(1)"] = RuntimeError("denied")

        assert await driver.count_records(TABLE) is None

    async def test_describe_table(self, driver, fake_backend):
        fake_backend.responses["information_schema.columns"] = [{"COLUMN_NAME": "ID"}]

        result = await driver.describe_table(CatalogNode.from_dict(TABLE))

        assert result.results == [{"COLUMN_NAME": "ID"}]

    async def test_get_children_for_item(self, driver, fake_backend):
        children = await driver.get_children_for_item(
            {"type": "database", "label": "SALES", "database": "SALES"}
        )

        assert children[0].node_type is NodeType.RESOURCE_GROUP
        assert children[0].label == "Schemas"

    async def test_stubs(self, driver):
        assert await driver.search_items("table", "ORD") == []
        assert driver.get_static_completions() == {}

    async def test_test_connection_uses_its_own_session(self, driver, fake_backend):
        fake_backend.responses["SHOW WAREHOUSES"] = [{"name": "COMPUTE_WH"}]
        fake_backend.responses["SHOW DATABASES"] = [{"name": "ANALYTICS"}]

        await driver.test_connection()

        assert not driver.session.is_open
        assert len(fake_backend.connectors) == 1
        assert fake_backend.connectors[0].close_calls == 1

    async def test_test_connection_missing_parameter(self, credentials, fake_backend):
        driver = SnowflakeDriver(replace(credentials, warehouse=""), connector_factory=fake_backend)

        with pytest.raises(MissingParameterError):
            await driver.test_connection()

    async def test_context_manager(self, driver, fake_backend):
        async with driver:
            assert driver.session.is_open

        assert not driver.session.is_open
        assert fake_backend.connectors[0].close_calls == 1


class TestDriverFromProfile:

    def test_from_profile(self, tmp_path):
        config_path = tmp_path / "connections.toml"
        config_path.write_text('[dev]\naccount = "acct"\nuser = "me"\nwarehouse = "WH"\ndatabase = "DB"\n')

        driver = SnowflakeDriver.from_profile("dev", path=str(config_path))

        assert driver.conn_id == "dev"
        assert driver.credentials.warehouse == "WH"
        assert not driver.session.is_open
