"""
Retry policy for TMDb requests.

The retry loop is modelled as a small state machine. ``next_state`` is a
pure function from the current state and the outcome of one attempt to the
next state; ``run_with_retry`` drives it against a real request and sleeps
between attempts with an injectable sleep function.

States:
    Attempting(n)   attempt n (1-based) is about to run
    Succeeded       the last attempt produced a usable response
    Failed(reason)  no further attempts will be made
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)

# Outcome kinds reported by one attempt
SUCCESS = "success"
RETRYABLE = "retryable"
UNRECOVERABLE = "unrecoverable"

# Failure reasons
REASON_UNRECOVERABLE = "unrecoverable"
REASON_EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 0.5

    def delay_after(self, attempt: int) -> float:
        """Backoff before the attempt following ``attempt``: base, 2x base, 4x base..."""
        return self.base_delay * (2 ** (attempt - 1))


@dataclass(frozen=True)
class Attempting:
    attempt: int


@dataclass(frozen=True)
class Succeeded:
    attempt: int


@dataclass(frozen=True)
class Failed:
    reason: str
    attempt: int


RetryState = Union[Attempting, Succeeded, Failed]


@dataclass(frozen=True)
class Outcome:
    """Result of a single attempt."""

    kind: str
    value: Any = None
    error: Optional[Exception] = None


def next_state(state: RetryState, outcome_kind: str, policy: RetryPolicy) -> RetryState:
    """Transition from ``Attempting(n)`` given the kind of outcome attempt n had."""
    if not isinstance(state, Attempting):
        raise ValueError(f"No transition out of terminal state {state!r}")

    if outcome_kind == SUCCESS:
        return Succeeded(state.attempt)
    if outcome_kind == UNRECOVERABLE:
        return Failed(REASON_UNRECOVERABLE, state.attempt)
    if outcome_kind == RETRYABLE:
        if state.attempt >= policy.max_retries:
            return Failed(REASON_EXHAUSTED, state.attempt)
        return Attempting(state.attempt + 1)

    raise ValueError(f"Unknown outcome kind: {outcome_kind!r}")


def run_with_retry(
        attempt_fn: Callable[[int], Outcome],
        policy: RetryPolicy,
        sleep: Callable[[float], None] = time.sleep,
        label: str = "request",
):
    """
    Run ``attempt_fn`` until it succeeds, fails permanently or runs out of attempts.

    Args:
        attempt_fn: Called with the attempt number, returns an Outcome
        policy: Attempt count and backoff
        sleep: Sleep function, replaced in tests
        label: Description used in log messages

    Returns:
        (final_state, last_outcome)
    """
    state: RetryState = Attempting(1)
    outcome = Outcome(RETRYABLE)

    while isinstance(state, Attempting):
        attempt = state.attempt
        logger.debug(f"{label}: attempt {attempt}/{policy.max_retries}")
        outcome = attempt_fn(attempt)
        state = next_state(state, outcome.kind, policy)

        if isinstance(state, Attempting):
            delay = policy.delay_after(attempt)
            logger.warning(
                f"{label}: attempt {attempt}/{policy.max_retries} failed ({outcome.error}), "
                f"retrying in {delay:g}s"
            )
            sleep(delay)

    return state, outcome
