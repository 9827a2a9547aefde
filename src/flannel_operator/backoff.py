"""Backoff policies for the operator boot sequence.

A policy is a :class:`tenacity.Retrying` object carrying only the stop and
wait strategies. The operator copies it and adds its own retry predicate and
notifier.
"""

from __future__ import annotations

import time
from typing import Callable

from tenacity import (
    Retrying,
    stop_after_attempt,
    stop_after_delay,
    stop_any,
    stop_never,
    wait_exponential,
    wait_fixed,
)


def new_exponential_backoff(
    *,
    max_elapsed_time: float = 300.0,
    max_attempts: int = 0,
    initial_interval: float = 0.5,
    max_interval: float = 60.0,
    multiplier: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Retrying:
    """Exponential backoff bounded by elapsed time and/or attempt count.

    A zero ``max_elapsed_time`` or ``max_attempts`` disables that bound;
    disabling both retries forever.
    """

    stops = []
    if max_elapsed_time > 0:
        stops.append(stop_after_delay(max_elapsed_time))
    if max_attempts > 0:
        stops.append(stop_after_attempt(max_attempts))

    return Retrying(
        stop=stop_any(*stops) if stops else stop_never,
        wait=wait_exponential(
            multiplier=initial_interval, exp_base=multiplier, max=max_interval
        ),
        sleep=sleep,
    )


def new_constant_backoff(
    max_attempts: int,
    interval: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(interval),
        sleep=sleep,
    )
