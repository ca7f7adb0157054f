"""Retry with exponential backoff and jitter.

Wraps an async operation and re-invokes it on transient failures: rate
limiting, 5xx server errors and network failures. Every other error
propagates on first occurrence. Wrapped operations must be idempotent; the
engine cannot tell a failed request from one that partially succeeded.
"""

import asyncio
import dataclasses
import math
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from .cancellation import CancellationToken
from .errors import ErrorKind
from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RETRYABLE_KINDS = frozenset({ErrorKind.RATE_LIMITED, ErrorKind.SERVER, ErrorKind.NETWORK})


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration.

    Attributes:
        max_attempts: Total tries including the first one (default: 4)
        base_delay_ms: Delay before the first retry (default: 1000)
        max_delay_ms: Cap on the exponential delay, before jitter (default: 30000)
        jitter_fraction: Relative jitter in [0, 1] (default: 0.1)
        is_retryable: Custom classifier replacing is_retryable_error
    """

    max_attempts: int = 4
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000
    jitter_fraction: float = 0.1
    is_retryable: Optional[Callable[[BaseException], bool]] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 0 <= self.jitter_fraction <= 1:
            raise ValueError("jitter_fraction must be between 0 and 1")

    def with_overrides(self, **changes: Any) -> "RetryPolicy":
        """Return a copy of the policy with some fields replaced."""
        return dataclasses.replace(self, **changes)


DEFAULT_RETRY_POLICY = RetryPolicy()


def is_retryable_error(error: BaseException) -> bool:
    """Check if an error is transient (rate limited, server error or network failure)."""
    return getattr(error, "kind", None) in RETRYABLE_KINDS


def compute_delay(
    attempt: int,
    policy: RetryPolicy,
    retry_after: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Compute the backoff delay before the next try.

    Args:
        attempt: Zero-based index of the attempt that just failed
        policy: Retry policy supplying the delay bounds
        retry_after: Server-supplied hint in seconds; used as-is when positive
        rng: Random source for jitter

    Returns:
        Delay in whole milliseconds, never negative
    """
    if retry_after is not None and retry_after > 0:
        return int(retry_after * 1000)

    base = max(policy.base_delay_ms, 0)
    cap = max(policy.max_delay_ms, 0)
    delay = min(base * 2**attempt, cap)

    spread = (rng or random).uniform(-1.0, 1.0)
    delay = delay + delay * policy.jitter_fraction * spread
    return max(0, math.floor(delay))


class RetryEngine:
    """
    Executes async operations under a RetryPolicy.

    The engine holds no per-call state, so one instance can serve any number
    of concurrent calls.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            policy: Default policy for calls that don't pass one
            sleep: Coroutine used for backoff sleeps (seconds)
            rng: Random source for jitter
        """
        self.policy = policy or DEFAULT_RETRY_POLICY
        self._sleep = sleep
        self._rng = rng

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: Optional[RetryPolicy] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> T:
        """
        Run `operation`, retrying transient failures.

        Args:
            operation: No-argument coroutine function to invoke
            policy: Policy for this call (default: the engine's policy)
            cancel_token: Token that aborts the call, racing both attempts and sleeps

        Returns:
            The operation's result

        Raises:
            The last error raised by the operation, unchanged, or
            RequestCancelledError if `cancel_token` is cancelled.
        """
        policy = policy or self.policy

        async def attempt() -> T:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
                return await cancel_token.race(operation())
            return await operation()

        async def sleep(seconds: float) -> None:
            if cancel_token is not None:
                await cancel_token.sleep(seconds, self._sleep)
            else:
                await self._sleep(seconds)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=self._wait_for(policy),
            retry=retry_if_exception(self._classifier_for(policy)),
            sleep=sleep,
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            return await retrying(attempt)
        except Exception as exc:
            logger.debug(
                "operation failed",
                attempts=retrying.statistics.get("attempt_number"),
                error_kind=_kind_name(exc),
            )
            raise

    def _wait_for(self, policy: RetryPolicy) -> Callable[[RetryCallState], float]:
        def wait(retry_state: RetryCallState) -> float:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            retry_after = getattr(error, "retry_after", None)
            delay_ms = compute_delay(
                retry_state.attempt_number - 1,
                policy,
                retry_after=retry_after,
                rng=self._rng,
            )
            return delay_ms / 1000

        return wait

    @staticmethod
    def _classifier_for(policy: RetryPolicy) -> Callable[[BaseException], bool]:
        predicate = policy.is_retryable or is_retryable_error

        def should_retry(error: BaseException) -> bool:
            # Cancellation always wins over the classifier.
            if not isinstance(error, Exception):
                return False
            if getattr(error, "kind", None) is ErrorKind.CANCELLED:
                return False
            return bool(predicate(error))

        return should_retry


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
    **overrides: Any,
) -> T:
    """
    Execute an operation with retry logic.

    Example:
        result = await with_retry(lambda: client.create_invoice(data), max_attempts=6)
    """
    policy = policy or DEFAULT_RETRY_POLICY
    if overrides:
        policy = policy.with_overrides(**overrides)
    return await RetryEngine(policy).execute(operation, cancel_token=cancel_token)


def _kind_name(error: BaseException) -> str:
    kind = getattr(error, "kind", None)
    return kind.value if isinstance(kind, ErrorKind) else type(error).__name__


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    sleep_seconds = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        "retrying operation",
        attempt=retry_state.attempt_number,
        delay_ms=int(sleep_seconds * 1000),
        error_kind=_kind_name(error) if error is not None else None,
    )
