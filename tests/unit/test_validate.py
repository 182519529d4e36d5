"""Unit tests for connection validation."""

import dataclasses

import pytest

from snowexplorer.errors import (
    ConnectionError,
    MissingParameterError,
    ObjectNotFoundError,
    ProbeQueryError,
)
from snowexplorer.session import validate


@pytest.fixture
def healthy_backend(fake_backend):
    fake_backend.responses["SHOW WAREHOUSES"] = [{"name": "COMPUTE_WH"}, {"name": "Load WH"}]
    fake_backend.responses["SHOW DATABASES"] = [{"name": "ANALYTICS"}, {"name": "SNOWFLAKE"}]
    fake_backend.responses["SELECT 1"] = [{"1": 1}]
    return fake_backend


@pytest.mark.anyio
class TestValidate:
    """Tests for validate()"""

    async def test_valid_credentials(self, credentials, healthy_backend):
        await validate(credentials, healthy_backend)

        assert healthy_backend.connect_calls == 1
        assert healthy_backend.connectors[0].close_calls == 1

    @pytest.mark.parametrize("parameter, value", [
        ("database", ""),
        ("database", None),
        ("warehouse", "   "),
    ])
    async def test_missing_parameter_makes_no_network_call(
        self, credentials, healthy_backend, parameter, value
    ):
        incomplete = dataclasses.replace(credentials, **{parameter: value})

        with pytest.raises(MissingParameterError) as exc_info:
            await validate(incomplete, healthy_backend)

        assert exc_info.value.parameter == parameter
        assert isinstance(exc_info.value, ValueError)
        assert healthy_backend.connectors == []

    async def test_database_checked_before_warehouse(self, credentials, healthy_backend):
        incomplete = dataclasses.replace(credentials, database="", warehouse="")

        with pytest.raises(MissingParameterError, match="database"):
            await validate(incomplete, healthy_backend)

    async def test_connection_failure(self, credentials, healthy_backend):
        healthy_backend.connect_error = RuntimeError("Incorrect username or password")

        with pytest.raises(ConnectionError):
            await validate(credentials, healthy_backend)

    async def test_probe_failure(self, credentials, healthy_backend):
        healthy_backend.responses["SELECT 1"] = RuntimeError("No active warehouse selected")

        with pytest.raises(ProbeQueryError, match="No active warehouse selected") as exc_info:
            await validate(credentials, healthy_backend)

        assert exc_info.value.result.error
        assert healthy_backend.connectors[0].close_calls == 1

    async def test_warehouse_not_found(self, credentials, healthy_backend):
        missing = dataclasses.replace(credentials, warehouse="NOPE_WH")

        with pytest.raises(ObjectNotFoundError) as exc_info:
            await validate(missing, healthy_backend)

        assert exc_info.value.kind == "warehouse"
        assert exc_info.value.name == "NOPE_WH"
        assert "Warehouse 'NOPE_WH' not found" in str(exc_info.value)
        assert healthy_backend.connectors[0].close_calls == 1

    async def test_database_not_found(self, credentials, healthy_backend):
        missing = dataclasses.replace(credentials, database="OTHER")

        with pytest.raises(ObjectNotFoundError) as exc_info:
            await validate(missing, healthy_backend)

        assert exc_info.value.kind == "database"

    async def test_unquoted_names_match_case_insensitively(self, credentials, healthy_backend):
        await validate(dataclasses.replace(credentials, warehouse="compute_wh"), healthy_backend)

    async def test_quoted_names_match_exactly(self, credentials, healthy_backend):
        await validate(dataclasses.replace(credentials, warehouse='"Load WH"'), healthy_backend)

        with pytest.raises(ObjectNotFoundError):
            await validate(dataclasses.replace(credentials, warehouse='"load wh"'), healthy_backend)

    async def test_show_failure_reports_detail(self, credentials, healthy_backend):
        healthy_backend.responses["SHOW WAREHOUSES"] = RuntimeError("Insufficient privileges")

        with pytest.raises(ObjectNotFoundError, match="Insufficient privileges"):
            await validate(credentials, healthy_backend)
