# src/kvharness/harness/polling.py
"""Blocking poll loop for long-running Key Vault operations.

Works with the SDK's pollers (begin_delete_key, begin_create_certificate,
...) or anything exposing the same status()/wait()/result() surface.

Completion is read from status(), never from done(). Key Vault's delete and
recover pollers run no background thread until wait() is called, so done()
is True from the start; only wait() drives their polling method against the
service. Each wait() on an unfinished delete poller starts a fresh polling
thread, so wait() is called without a timeout and returns only once that
thread has ended.

No timeout is applied: in live mode an operation takes as long as the
service takes, and the test process's own timeout is the only bound.
"""

from __future__ import annotations

import time
from typing import Protocol, TypeVar

from azure.core.exceptions import HttpResponseError

from kvharness.contracts.enums import TERMINAL_FAILURE_STATUSES, TERMINAL_SUCCESS_STATUSES
from kvharness.contracts.errors import OperationFailedError
from kvharness.core.logging import get_logger

logger = get_logger(__name__)

T_co = TypeVar("T_co", covariant=True)


class OperationHandle(Protocol[T_co]):
    """Handle to an in-flight service operation."""

    def status(self) -> str: ...

    def wait(self, timeout: float | None = None) -> None: ...

    def result(self) -> T_co: ...


def poll_until_done(operation: OperationHandle[T_co], interval: float) -> T_co:
    """Block until the operation reaches a terminal status and return its result.

    The SDK pollers poll the service themselves, at the interval given to
    begin_*, for as long as wait() blocks. A handle whose wait() returns
    before the status is terminal is waited on again after sleeping
    interval seconds. A handle already complete on the first check returns
    without waiting.

    Args:
        operation: Long-running operation handle
        interval: Seconds to sleep between waits that end early

    Returns:
        The operation's terminal result

    Raises:
        OperationFailedError: If the operation reports a terminal failure
            status, including when wait() re-raises the poller's error
    """
    checks = 0
    while True:
        checks += 1
        status = operation.status().lower()
        if status in TERMINAL_SUCCESS_STATUSES:
            logger.debug("operation_completed", status=status, checks=checks)
            return operation.result()
        if status in TERMINAL_FAILURE_STATUSES:
            raise OperationFailedError(status)

        if checks > 1:
            time.sleep(interval)
        try:
            operation.wait()
        except HttpResponseError as e:
            failed_status = operation.status().lower()
            if failed_status in TERMINAL_FAILURE_STATUSES:
                raise OperationFailedError(failed_status) from e
            raise
