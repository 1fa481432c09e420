"""
Tests for daoharness.rpc module

Tests verify:
- get_table_rows request body and decoded snapshot
- Connection errors and timeouts -> NodeUnavailableError (no retry)
- Node error bodies -> RPCError with the node's details
- Malformed answers -> RPCError
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
import requests
from daoharness.errors import NodeUnavailableError, RPCError
from daoharness.models import TableQuery
from daoharness.rpc import ChainRPCClient


def make_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    response.text = text
    return response


@pytest.fixture
def client():
    client = ChainRPCClient("http://127.0.0.1:8888/", timeout=5)
    client.session = MagicMock()
    yield client


class TestGetTableRows:
    """Test table reads."""

    def test_posts_query_body(self, client):
        """Test query body posted to get_table_rows."""
        client.session.post.return_value = make_response(payload={"rows": [], "more": False})

        client.get_table_rows(TableQuery(code="daoregistry1", scope="daoregistry1", table="daos"))

        client.session.post.assert_called_once_with(
            "http://127.0.0.1:8888/v1/chain/get_table_rows",
            json={
                "code": "daoregistry1",
                "scope": "daoregistry1",
                "table": "daos",
                "json": True,
                "limit": 100,
            },
            timeout=5,
        )

    def test_returns_snapshot(self, client):
        """Test rows and more flag decoded."""
        rows = [{"dao_id": 0, "dao": "dao.org1"}]
        client.session.post.return_value = make_response(payload={"rows": rows, "more": True})

        snapshot = client.get_table_rows(TableQuery(code="c", scope="s", table="daos"))

        assert snapshot.rows == rows
        assert snapshot.more is True

    def test_get_rows_shorthand(self, client):
        """Test shorthand returning rows only."""
        client.session.post.return_value = make_response(payload={"rows": [{"key": "a"}]})

        assert client.get_rows("c", "s", "config", limit=10) == [{"key": "a"}]
        assert client.session.post.call_args.kwargs["json"]["limit"] == 10

    def test_missing_rows_is_an_error(self, client):
        """Test answer without rows."""
        client.session.post.return_value = make_response(payload={"unexpected": 1})

        with pytest.raises(RPCError, match="returned no 'rows'"):
            client.get_table_rows(TableQuery(code="c", scope="s", table="daos"))


class TestErrors:
    """Test error mapping; nothing is retried."""

    def test_connection_error(self, client):
        """Test unreachable node."""
        client.session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(NodeUnavailableError, match="Cannot reach node"):
            client.get_info()
        assert client.session.post.call_count == 1

    def test_timeout(self, client):
        """Test node timeout."""
        client.session.post.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(NodeUnavailableError, match="Node timeout"):
            client.get_info()
        assert client.session.post.call_count == 1

    def test_node_error_body(self, client):
        """Test node error details kept."""
        client.session.post.return_value = make_response(
            status_code=500,
            payload={
                "code": 500,
                "message": "Internal Service Error",
                "error": {
                    "what": "Table not specified in the ABI",
                    "details": [{"message": "Table nosuch is not specified in the ABI"}],
                },
            },
        )

        with pytest.raises(RPCError) as exc_info:
            client.get_table_rows(TableQuery(code="c", scope="s", table="nosuch"))

        assert exc_info.value.status_code == 500
        assert "Table nosuch is not specified in the ABI" in str(exc_info.value)
        assert exc_info.value.payload["code"] == 500

    def test_non_json_error_body(self, client):
        """Test error body that is not JSON."""
        client.session.post.return_value = make_response(status_code=502, text="Bad Gateway")

        with pytest.raises(RPCError, match="Bad Gateway"):
            client.get_info()

    def test_malformed_success_body(self, client):
        """Test 200 answer that is not JSON."""
        client.session.post.return_value = make_response(status_code=200, text="<html>")

        with pytest.raises(RPCError, match="malformed JSON"):
            client.get_info()


class TestAccounts:
    """Test account and balance lookups."""

    def test_account_exists(self, client):
        """Test existing account."""
        client.session.post.return_value = make_response(payload={"account_name": "testuseraaa"})
        assert client.account_exists("testuseraaa") is True

    def test_account_missing(self, client):
        """Test unknown key error means no such account."""
        client.session.post.return_value = make_response(
            status_code=500, payload={"error": {"what": "unknown key"}}
        )
        assert client.account_exists("nobody") is False

    def test_account_query_exception_means_missing(self, client):
        """Test that the named account query error means no such account."""
        client.session.post.return_value = make_response(status_code=500, payload={
            "code": 500,
            "message": "Internal Service Error",
            "error": {
                "code": 3060002,
                "name": "account_query_exception",
                "what": "Account Query Exception",
                "details": [{"message": "Fail to retrieve account for nobody"}],
            },
        })
        assert client.account_exists("nobody") is False

    def test_other_node_fault_is_raised(self, client):
        """Test that a 500 unrelated to the account is not read as missing."""
        client.session.post.return_value = make_response(status_code=500, payload={
            "code": 500,
            "message": "Internal Service Error",
            "error": {
                "name": "database_exception",
                "what": "Database exception",
                "details": [{"message": "database dirty flag set"}],
            },
        })

        with pytest.raises(RPCError) as exc_info:
            client.account_exists("testuseraaa")
        assert exc_info.value.status_code == 500

    def test_currency_balance(self, client):
        """Test balance lookup body."""
        client.session.post.return_value = make_response(payload=["100.0000 TLOS"])

        assert client.get_currency_balance("eosio.token", "testuseraaa", "TLOS") == ["100.0000 TLOS"]
        assert client.session.post.call_args.kwargs["json"] == {
            "code": "eosio.token", "account": "testuseraaa", "symbol": "TLOS"
        }


def test_context_manager_closes_session():
    """Test session closed on exit."""
    with patch("daoharness.rpc.requests.Session") as mock_session_class:
        with ChainRPCClient("http://127.0.0.1:8888") as client:
            pass
        mock_session_class.return_value.close.assert_called_once()
