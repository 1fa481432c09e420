"""
Chain RPC Client for read-only queries against the node's chain API.

Table reads are how the harness observes contract state. Requests are
synchronous and never retried: the node is a local, controlled test node and a
failed read is a real failure.
"""

import requests
import logging
from typing import Dict, Any, List, Optional

from .errors import NodeUnavailableError, RPCError
from .logger import log_table_read, track_duration
from .models import TableQuery, TableSnapshot

logger = logging.getLogger(__name__)

# Error names nodeos uses when get_account is asked for a missing account
UNKNOWN_ACCOUNT_ERRORS = ("unknown_key", "account_query_exception")


def _error_text(payload: Dict[str, Any]) -> str:
    """Flatten a node error body into readable text."""
    error = payload.get("error") or {}
    details = [d.get("message", "") for d in error.get("details", []) if d.get("message")]
    parts = [error.get("what") or payload.get("message") or "Unknown node error"]
    parts.extend(details)
    return ": ".join(p for p in parts if p)


def _is_unknown_account(payload: Dict[str, Any]) -> bool:
    """True when a get_account error body says the account does not exist."""
    error = payload.get("error") or {}
    if error.get("name") in UNKNOWN_ACCOUNT_ERRORS:
        return True
    text = _error_text(payload).lower()
    return "unknown key" in text or "fail to retrieve account" in text


class ChainRPCClient:
    """
    Client for the node's ``/v1/chain`` query endpoints.

    Provides:
    - Table reads (get_table_rows)
    - Chain info (used to confirm the local node)
    - Account and currency balance lookups
    """

    def __init__(self, node_url: str, timeout: Optional[float] = 30.0):
        """
        Initialize chain RPC client.

        Args:
            node_url: Base URL of the node (e.g., http://127.0.0.1:8888)
            timeout: Request timeout in seconds (None waits forever)
        """
        self.node_url = node_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        logger.debug(f"ChainRPCClient initialized: {self.node_url}")

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a chain API request and decode the JSON answer.

        Raises:
            NodeUnavailableError: Node is down, unreachable, or timed out
            RPCError: Node answered with an error status
        """
        endpoint = f"{self.node_url}{path}"

        try:
            response = self.session.post(endpoint, json=body, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Node unavailable at {endpoint}: {e}")
            raise NodeUnavailableError(f"Cannot reach node at {endpoint}") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Node timeout at {endpoint}: {e}")
            raise NodeUnavailableError(f"Node timeout: {endpoint}") from e

        if response.status_code != 200:
            try:
                payload = response.json()
            except ValueError:
                payload = {"message": response.text}
            text = _error_text(payload)
            logger.error(f"Node error {response.status_code} on {path}: {text}")
            raise RPCError(
                f"{path} failed with HTTP {response.status_code}: {text}",
                status_code=response.status_code,
                payload=payload,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RPCError(
                f"{path} returned malformed JSON: {response.text[:200]}",
                status_code=response.status_code,
            ) from e

    def get_table_rows(self, query: TableQuery) -> TableSnapshot:
        """
        Read rows of a contract table.

        Args:
            query: TableQuery naming code, scope, table and limit

        Returns:
            TableSnapshot with the decoded rows and the ``more`` flag
        """
        body = query.to_dict()

        with track_duration() as elapsed:
            result = self._post("/v1/chain/get_table_rows", body)

        if "rows" not in result:
            raise RPCError(f"get_table_rows for {query} returned no 'rows': {result}")

        rows = result["rows"]
        more = bool(result.get("more", False))
        log_table_read(body, len(rows), elapsed())
        return TableSnapshot(rows=rows, more=more)

    def get_rows(self, code: str, scope: str, table: str, limit: int = 100) -> List[Dict[str, Any]]:
        """Shorthand for get_table_rows returning only the rows."""
        return self.get_table_rows(TableQuery(code=code, scope=scope, table=table, limit=limit)).rows

    def get_info(self) -> Dict[str, Any]:
        """Return chain info (chain_id, head_block_num, ...)."""
        return self._post("/v1/chain/get_info", {})

    def get_account(self, account_name: str) -> Dict[str, Any]:
        """Return the node's account record."""
        return self._post("/v1/chain/get_account", {"account_name": account_name})

    def account_exists(self, account_name: str) -> bool:
        """
        Return True if the account exists on chain.

        Raises:
            RPCError: Node error other than an unknown account
        """
        try:
            self.get_account(account_name)
        except RPCError as e:
            # Unknown accounts come back as an error body, not as 404
            if _is_unknown_account(e.payload):
                return False
            raise
        return True

    def get_currency_balance(self, code: str, account: str,
                             symbol: Optional[str] = None) -> List[str]:
        """
        Return an account's balances on a token contract.

        Returns:
            List of asset strings, e.g. ["100.0000 TLOS"]
        """
        body = {"code": code, "account": account}
        if symbol:
            body["symbol"] = symbol
        return self._post("/v1/chain/get_currency_balance", body)

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        logger.debug("HTTP session closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
