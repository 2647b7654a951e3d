"""Tests for the aggregator CLI."""

import json
from unittest.mock import patch

import pytest

from ipo_data_hub.cli.aggregator import main
from ipo_data_hub.cli.output import EXIT_FAILURE, EXIT_INVALID_INPUT, EXIT_OK
from ipo_data_hub.domain.allotment.models import AllotmentValidationError
from ipo_data_hub.io.connectors.aggregator import (
    AggregatorBatchResult,
    AggregatorClientError,
    AggregatorPanResult,
)


@pytest.fixture
def client():
    with patch("ipo_data_hub.cli.aggregator.IpoNinjaClient") as client_cls:
        yield client_cls.return_value


class TestAggregatorCli:
    def test_allotted_list(self, client, capsys):
        client.list_allotted_ipos.return_value = [{"ipoid": 101}, {"ipoid": 102}]

        assert main(["allotted-list"]) == EXIT_OK

        assert json.loads(capsys.readouterr().out) == {
            "data": [{"ipoid": 101}, {"ipoid": 102}],
            "totalCount": 2,
        }

    def test_allotted_list_failure(self, client, capsys):
        client.list_allotted_ipos.side_effect = AggregatorClientError("Failed to fetch allotted IPOs: down")

        assert main(["allotted-list"]) == EXIT_FAILURE
        assert "Failed to fetch" in capsys.readouterr().err

    def test_check_repeatable_pan(self, client, capsys):
        client.check_allotment.return_value = AggregatorBatchResult(
            data=[AggregatorPanResult(pancard="ABCDE1234F", data={"allotted": True})],
            total_requests=1,
            successful_requests=1,
        )

        exit_code = main(["check", "--ipo-id", "101", "--pan", "ABCDE1234F", "--pan", "PQRST6789Z"])

        assert exit_code == EXIT_OK
        client.check_allotment.assert_called_once_with("101", ["ABCDE1234F", "PQRST6789Z"])
        assert json.loads(capsys.readouterr().out)["totalRequests"] == 1

    def test_check_validation_error(self, client, capsys):
        client.check_allotment.side_effect = AllotmentValidationError("panNumber", "Invalid PAN format")

        assert main(["check", "--ipo-id", "101", "--pan", "bad"]) == EXIT_INVALID_INPUT
        assert json.loads(capsys.readouterr().err)["field"] == "panNumber"
