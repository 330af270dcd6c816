"""Best-effort side effects run after a primary write.

A side effect is a named zero-argument callable returning an awaitable.
Effects are awaited one after another; each failure is logged and dropped so
that neither the primary result nor the remaining effects are affected.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

logger = logging.getLogger(__name__)

SideEffect = tuple[str, Callable[[], Awaitable[Any]]]


async def run_best_effort(effects: Sequence[SideEffect]) -> list[str]:
    """Run every effect; return the names of those that failed."""
    failed: list[str] = []
    for name, effect in effects:
        try:
            await effect()
        except Exception:
            logger.exception("Side effect '%s' failed; continuing", name)
            failed.append(name)
    return failed
