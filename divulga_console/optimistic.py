from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from divulga_domain.errors import WriteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptimisticCommand:
    """A local mutation, the backend call confirming it, and the recovery path.

    ``apply`` runs before the backend is contacted. When ``confirm`` fails with a
    ``WriteError`` nothing is rolled back field by field; ``reconcile`` receives
    the error and is expected to rebuild state from the backend.
    """

    name: str
    apply: Callable[[], None]
    confirm: Callable[[], Awaitable[None]]
    reconcile: Callable[[WriteError], Awaitable[None]]


async def run_optimistic(command: OptimisticCommand) -> bool:
    command.apply()
    try:
        await command.confirm()
    except WriteError as exc:
        logger.warning("%s failed, reconciling: %s", command.name, exc.message)
        await command.reconcile(exc)
        return False
    return True
