"""Bounded polling until a remote resource reaches a terminal state.

Operations that trigger an asynchronous transition on the Management API
(key creation, import, deletion) call wait_until() with a probe that reads
the key and reports whether the expected state has been reached.

Only "not done yet" is retried. An exception raised by the probe aborts the
wait immediately and propagates unchanged; running out of attempts raises
WaitTimeoutError so callers can tell the two apart.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from keyward.exceptions import WaitTimeoutError
from keyward.models import RetryBudget

log = structlog.get_logger()

Check = Callable[[], Awaitable[bool]]
Sleep = Callable[[float], Awaitable[None]]


async def wait_until(
    max_attempts: int,
    interval_ms: int,
    check: Check,
    *,
    sleep: Sleep = asyncio.sleep,
) -> None:
    """Call check until it returns True or the attempts run out.

    Args:
        max_attempts: Total number of times check may be invoked (>= 1)
        interval_ms: Pause between consecutive attempts in milliseconds (>= 0)
        check: Async probe returning True when done, False when not yet
        sleep: Awaitable sleep taking seconds, replaceable in tests

    Raises:
        ValueError: If the budget is invalid
        WaitTimeoutError: If check never returned True
        Exception: Whatever check raised, on the attempt it raised

    Cancelling the calling task interrupts both the probe and the sleep.
    """
    budget = RetryBudget(max_attempts=max_attempts, interval_ms=interval_ms)

    for attempt in range(1, budget.max_attempts + 1):
        if await check():
            log.debug("wait_condition_met", attempt=attempt)
            return

        if attempt < budget.max_attempts:
            log.debug(
                "wait_condition_pending",
                attempt=attempt,
                max_attempts=budget.max_attempts,
                interval_ms=budget.interval_ms,
            )
            await sleep(budget.interval_ms / 1000)

    log.warning(
        "wait_timeout",
        attempts=budget.max_attempts,
        interval_ms=budget.interval_ms,
    )
    raise WaitTimeoutError(budget.max_attempts, budget.interval_ms)


async def wait_until_budget(
    budget: RetryBudget,
    check: Check,
    *,
    sleep: Sleep = asyncio.sleep,
) -> None:
    """Same as wait_until() with the bounds taken from a RetryBudget."""
    await wait_until(budget.max_attempts, budget.interval_ms, check, sleep=sleep)
