"""
DAO Contract Harness - Errors

Exception hierarchy for the harness. Two kinds are scenario-fatal assertion
failures (ExpectedFailureMismatch, StateAssertionMismatch); the rest describe
what went wrong when talking to the node.
"""

from typing import Any, Dict, List, Optional


class HarnessError(Exception):
    """Base class for every error raised by the harness."""
    pass


class ConfigurationError(HarnessError):
    """Harness configuration is invalid or incomplete."""
    pass


class EnvironmentMismatchError(HarnessError):
    """
    Harness is not pointed at the intended local test node.

    Scenarios mutate shared contract tables, so this aborts the whole run.
    """
    pass


class NodeUnavailableError(HarnessError):
    """Node RPC endpoint is down, unreachable, or timed out."""
    pass


class RPCError(HarnessError):
    """
    Node answered a query with an error body.

    Attributes:
        status_code: HTTP status returned by the node
        payload: Decoded error body (or raw text wrapped in a dict)
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class ActionError(HarnessError):
    """
    Contract rejected an action.

    The message is the node's text, untouched. Classification into
    authorization/validation failures is left to the assertion layer.
    """

    def __init__(self, message: str, action: Optional[str] = None,
                 authorization: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.action = action
        self.authorization = authorization


class ExpectedFailureMismatch(HarnessError, AssertionError):
    """
    An action that had to fail either succeeded or failed for another reason.

    Attributes:
        expected: Substring the failure message had to contain
        actual: Actual failure message, or None when the action succeeded
        description: Human readable description of the expected failure
    """

    def __init__(self, expected: str, actual: Optional[str], description: str = ""):
        self.expected = expected
        self.actual = actual
        self.description = description

        if actual is None:
            text = (
                f"Expected failure did not happen: {description}\n"
                f"  expected error containing: {expected!r}\n"
                f"  actual: action succeeded"
            )
        else:
            text = (
                f"Action failed for the wrong reason: {description}\n"
                f"  expected error containing: {expected!r}\n"
                f"  actual error: {actual!r}"
            )
        super().__init__(text)


class StateAssertionMismatch(HarnessError, AssertionError):
    """
    Table contents differ from the expected snapshot.

    Attributes:
        query: Query that produced the rows
        expected: Expected rows
        actual: Rows returned by the node
        diff: Unified diff of the two, as JSON text
    """

    def __init__(self, query: Any, expected: List[Dict[str, Any]],
                 actual: List[Dict[str, Any]], diff: str):
        self.query = query
        self.expected = expected
        self.actual = actual
        self.diff = diff
        super().__init__(
            f"Table state mismatch for {query}:\n{diff}"
        )
