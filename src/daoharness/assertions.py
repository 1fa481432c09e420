"""
DAO Contract Harness - Assertion Layer

Expected-failure matching and table state verification.

All error-message matching goes through ``error_contains`` so a change in the
node's message format is fixed in one place.
"""

import difflib
import json
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from .errors import ActionError, ExpectedFailureMismatch, StateAssertionMismatch
from .logger import log_expected_failure
from .models import DaoRecord, ExpectedFailure, TableQuery, TableSnapshot

logger = logging.getLogger(__name__)

AUTHORIZATION_FAILURE_TEXT = "missing authority of"


class ActionOutcome(str, Enum):
    """How an action attempt ended, for reporting."""

    SUCCESS = "success"
    AUTH_FAILURE = "auth_failure"
    VALIDATION_FAILURE = "validation_failure"


def error_message(error: Optional[BaseException]) -> str:
    """Text of an error as the node reported it."""
    if error is None:
        return ""
    if isinstance(error, ActionError):
        return error.message
    return str(error)


def error_contains(error: Optional[BaseException], text_inside: str) -> bool:
    """The one substring matcher used for every expected failure."""
    return text_inside in error_message(error)


def classify_failure(error: Optional[BaseException]) -> ActionOutcome:
    if error is None:
        return ActionOutcome.SUCCESS
    if error_contains(error, AUTHORIZATION_FAILURE_TEXT):
        return ActionOutcome.AUTH_FAILURE
    return ActionOutcome.VALIDATION_FAILURE


def missing_authority(account: str) -> str:
    """Expected message fragment when ``account``'s authority is missing."""
    return f"{AUTHORIZATION_FAILURE_TEXT} {account}"


def assert_error(error: Optional[BaseException] = None, text_inside: str = "",
                 message: str = "", throw_error: bool = True,
                 expected: Optional[ExpectedFailure] = None) -> bool:
    """
    Check that ``error`` carries ``text_inside``.

    Args:
        error: Error raised by the failed action
        text_inside: Required substring of the error message
        message: Description of the expected failure, for diagnostics
        throw_error: Raise ExpectedFailureMismatch on mismatch (default) or
            only log it and return False
        expected: An ExpectedFailure bundling the four values above

    Returns:
        True when the message matches

    Raises:
        ExpectedFailureMismatch: Message does not match and throw_error is set
    """
    if expected is not None:
        error, text_inside = expected.error, expected.text_inside
        message, throw_error = expected.message, expected.throw_error

    actual = error_message(error)
    matched = error_contains(error, text_inside)
    log_expected_failure(message, text_inside, matched, actual,
                         outcome=classify_failure(error).value)

    if matched:
        return True
    if throw_error:
        raise ExpectedFailureMismatch(text_inside, actual, message)
    return False


def expect_failure(attempt: Callable[[], Any], required_substring: str,
                   description: str = "", throw_error: bool = True) -> Optional[ActionError]:
    """
    Run ``attempt`` and require it to fail with ``required_substring``.

    Only ActionError counts as a contract failure; transport and node errors
    propagate unchanged.

    Example:
        expect_failure(
            lambda: daoreg.update(0, "NEW_HASH_2", authorization="daoinfo11111@active"),
            "missing authority of daoregistry1",
            "dao cannot be updated by someone else",
        )

    Returns:
        The ActionError when it matched

    Raises:
        ExpectedFailureMismatch: Attempt succeeded, or failed for another reason
    """
    try:
        attempt()
    except ActionError as error:
        if assert_error(error, required_substring, description, throw_error):
            return error
        return None

    log_expected_failure(description, required_substring, False, "action succeeded",
                         outcome=ActionOutcome.SUCCESS.value)
    raise ExpectedFailureMismatch(required_substring, None, description)


@contextmanager
def expecting_failure(required_substring: str, description: str = "") -> Iterator[Dict[str, Any]]:
    """
    Block form of expect_failure.

        with expecting_failure("Organization not found", "dao 1 does not exist") as failure:
            daoreg.update(1, "NEW_HASH3", authorization=owner)
        failure["error"]  # the matching ActionError
    """
    failure: Dict[str, Any] = {"error": None}
    try:
        yield failure
    except ActionError as error:
        assert_error(error, required_substring, description, throw_error=True)
        failure["error"] = error
        return

    log_expected_failure(description, required_substring, False, "action succeeded",
                         outcome=ActionOutcome.SUCCESS.value)
    raise ExpectedFailureMismatch(required_substring, None, description)


def _normalize(rows: List[Any]) -> List[Any]:
    return [row.to_dict() if isinstance(row, DaoRecord) else row for row in rows]


def _pretty(rows: List[Any]) -> List[str]:
    # Field order is not compared, so sort keys to keep the diff to real changes
    return json.dumps(rows, indent=2, sort_keys=True, default=str).splitlines()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def rows_diff(expected: List[Any], actual: List[Any]) -> str:
    """Unified diff of two row lists rendered as JSON."""
    return "\n".join(difflib.unified_diff(
        _pretty(expected), _pretty(actual),
        fromfile="expected", tofile="actual", lineterm="",
    ))


def rows_equal(expected: List[Any], actual: List[Any]) -> bool:
    """
    Deep structural equality: same row order, same field set, same values.

    Field order inside a row is ignored. Numbers compare by value (``1`` equals
    ``1.0``) but never equal booleans or strings.
    """
    if _is_number(expected) and _is_number(actual):
        return expected == actual
    if type(expected) is not type(actual):
        return False
    if isinstance(expected, dict):
        if expected.keys() != actual.keys():
            return False
        return all(rows_equal(expected[k], actual[k]) for k in expected)
    if isinstance(expected, (list, tuple)):
        if len(expected) != len(actual):
            return False
        return all(rows_equal(e, a) for e, a in zip(expected, actual))
    return expected == actual


def assert_rows(query: Union[TableQuery, str], expected_rows: List[Any],
                actual_rows: List[Any]) -> None:
    """Compare already-fetched rows; raise StateAssertionMismatch on difference."""
    expected = _normalize(list(expected_rows))
    actual = list(actual_rows)
    if rows_equal(expected, actual):
        return
    diff = rows_diff(expected, actual)
    logger.error(f"Table state mismatch for {query}")
    raise StateAssertionMismatch(query, expected, actual, diff)


def expect_state(rpc, query: TableQuery, expected_rows: List[Any]) -> TableSnapshot:
    """
    Read ``query`` and require the rows to equal ``expected_rows`` exactly.

    ``expected_rows`` may mix plain dicts and DaoRecord objects.

    Returns:
        The snapshot that was read

    Raises:
        StateAssertionMismatch: Rows differ in order, fields or values
    """
    snapshot = rpc.get_table_rows(query)
    assert_rows(query, expected_rows, snapshot.rows)
    return snapshot


def expect_empty(rpc, query: TableQuery) -> TableSnapshot:
    """Require ``query`` to return no rows."""
    return expect_state(rpc, query, [])
