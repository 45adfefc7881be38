"""
Retry Controller - exponential backoff over tagged attempt outcomes.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from appcraft.core.logging_config import logger
from appcraft.modules.proxy.dispatcher import AttemptOutcome


AttemptFn = Callable[[int], Awaitable[AttemptOutcome]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int
    backoff_base: float = 2.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_delay(self, retry_number: int) -> float:
        """Delay in seconds before retry n (1-indexed): base ** n, no jitter"""
        return self.backoff_base ** retry_number

    def should_retry(self, outcome: AttemptOutcome, attempt: int) -> bool:
        return outcome.is_transient and attempt <= self.max_retries


async def run_with_retries(
    attempt_fn: AttemptFn,
    policy: RetryPolicy,
    sleep: SleepFn = asyncio.sleep,
) -> AttemptOutcome:
    """
    Run attempts strictly in sequence until one is not retryable.

    Returns the outcome of the last attempt. Cancellation of the calling
    task propagates out of both the attempt and the backoff sleep.
    """
    attempt = 1
    while True:
        outcome = await attempt_fn(attempt)
        if not policy.should_retry(outcome, attempt):
            return outcome

        delay = policy.backoff_delay(attempt)
        logger.warning(
            f"Proxy {outcome.method} {outcome.url} [{outcome.code}] "
            f"(attempt {attempt}/{policy.max_attempts}), retrying in {delay:.1f}s...",
            extra={
                "event_type": "proxy_retry",
                "error_kind": outcome.error_kind.value if outcome.error_kind else None,
                "attempt": attempt,
                "max_attempts": policy.max_attempts,
                "retry_delay": delay,
            }
        )
        await sleep(delay)
        attempt += 1
