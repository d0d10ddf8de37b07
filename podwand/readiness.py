"""Polling a new ephemeral container until it reports running."""

import time
from typing import Any, Callable

from podwand.pods import find_status
from podwand.types import ContainerState, PollPolicy, PollResult, ReadinessState
from podwand.ui import print_debug


def poll_until_running(
    fetch: Callable[[], dict[str, Any]],
    name: str,
    policy: PollPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """Re-fetch the pod until container `name` is running or attempts run out.

    Returns RUNNING at the first attempt that sees it running, otherwise
    TIMED_OUT after `policy.attempts` attempts. A slow start is not an error,
    but a ConnectivityError from `fetch` (the proxy died) propagates.
    """
    state = ReadinessState.WAITING

    for attempt in range(1, policy.attempts + 1):
        sleep(policy.interval)

        status = find_status(fetch(), name)

        if status is not None and status.state == ContainerState.RUNNING:
            state = ReadinessState.RUNNING
            print_debug(f"Attempt {attempt}/{policy.attempts}: {name} is running")
            return PollResult(state=state, attempts=attempt)

        observed = status.state.value if status else "no status yet"
        print_debug(f"Attempt {attempt}/{policy.attempts}: {name} is {observed}")

    state = ReadinessState.TIMED_OUT
    return PollResult(state=state, attempts=policy.attempts)
