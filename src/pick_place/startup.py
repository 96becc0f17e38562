"""Define a bounded readiness handshake with the remote collaborators."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

from pick_place.logging import log_info, log_warning
from pick_place.results import InitializationError

if TYPE_CHECKING:
    from pick_place.config import OrchestratorConfig
    from pick_place.interfaces import RemoteService


def wait_for_collaborators(
    collaborators: dict[str, RemoteService],
    attempts: int = 10,
    initial_backoff_s: float = 0.5,
    backoff_factor: float = 2.0,
    max_backoff_s: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Wait until every collaborator reports that it is available, backing off between polls.

    :param collaborators: Map from descriptive names to remote collaborators
    :param attempts: Maximum number of polls before giving up
    :param initial_backoff_s: Delay (seconds) after the first unsuccessful poll
    :param backoff_factor: Multiplier applied to the delay after each unsuccessful poll
    :param max_backoff_s: Upper bound (seconds) on the delay between polls
    :param sleep: Sleep function (seconds), injectable for testing
    :raises: InitializationError, if some collaborator is still unavailable after all attempts
    """
    pending = dict(collaborators)
    backoff_s = initial_backoff_s

    for attempt in range(1, attempts + 1):
        pending = {name: c for name, c in pending.items() if not c.is_available()}
        if not pending:
            log_info(f"All collaborators available after {attempt} attempt(s)")
            return

        log_warning(f"Waiting for {sorted(pending)} (attempt {attempt}/{attempts})")
        if attempt < attempts:
            sleep(backoff_s)
            backoff_s = min(backoff_s * backoff_factor, max_backoff_s)

    error = f"Collaborators unavailable after {attempts} attempts: {sorted(pending)}"
    raise InitializationError(error)


def wait_with_config(collaborators: dict[str, RemoteService], config: OrchestratorConfig) -> None:
    """Run the readiness handshake using the retry parameters of the given config."""
    wait_for_collaborators(
        collaborators,
        attempts=config.startup_attempts,
        initial_backoff_s=config.startup_initial_backoff_s,
        backoff_factor=config.startup_backoff_factor,
        max_backoff_s=config.startup_max_backoff_s,
    )
