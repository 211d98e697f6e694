"""Join PIN / access code issuance.

Codes are six-digit numeric strings in ``100000..999999`` that are unique in their
namespace and never a trivial sequence (all digits equal, or stepping by exactly +1
or -1 per digit). Uniqueness is delegated to an async ``is_taken`` callback that
queries the namespace; the draw budget is a safety valve, not an expected path.
"""
from __future__ import annotations

import logging
import random
import secrets
from typing import Awaitable, Callable, Optional

from scorehub.config import settings
from scorehub.utils.exceptions import CodeSpaceExhaustedError
from scorehub.utils.metrics import CODE_DRAWS_TOTAL

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999

_system_random = secrets.SystemRandom()


def is_trivial_code(code: str) -> bool:
    if len(code) < 2 or not code.isdigit():
        return False

    digits = [int(c) for c in code]
    steps = {b - a for a, b in zip(digits, digits[1:])}
    # {0}: all identical, {1}: ascending, {-1}: descending
    return len(steps) == 1 and steps <= {-1, 0, 1}


def generate_candidate(rng: Optional[random.Random] = None) -> str:
    """Draw a non-trivial six-digit code (not checked for uniqueness)."""
    rng = rng or _system_random
    while True:
        code = str(rng.randint(CODE_MIN, CODE_MAX))
        if not is_trivial_code(code):
            return code


async def allocate_code(
    is_taken: Callable[[str], Awaitable[bool]],
    *,
    namespace: str = "code",
    max_attempts: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> str:
    attempts = max_attempts if max_attempts is not None else settings.CODE_MAX_ATTEMPTS
    for attempt in range(1, max(1, attempts) + 1):
        candidate = generate_candidate(rng)
        if not await is_taken(candidate):
            CODE_DRAWS_TOTAL.labels(namespace=namespace, result="issued").inc()
            if attempt > 1:
                logger.info("codes.allocated namespace=%s attempts=%d", namespace, attempt)
            return candidate
        CODE_DRAWS_TOTAL.labels(namespace=namespace, result="taken").inc()

    logger.error("codes.exhausted namespace=%s attempts=%d", namespace, attempts)
    raise CodeSpaceExhaustedError(details={"namespace": namespace, "attempts": attempts})
