"""Short hex ID generation for tasks.

Task ids are typed on the command line (``aura move 3fa1 done``), so they
stay short: random lowercase hex, widened only when collisions pile up.
"""

import random
from typing import Set


TASK_ID_MIN_DIGITS = 4
TASK_ID_MAX_ATTEMPTS = 3


def generate_task_id(existing_ids: Set[str], min_digits: int = TASK_ID_MIN_DIGITS) -> str:
    """Generate unique hex task ID.

    Args:
        existing_ids: Set of already used task IDs (will be modified)
        min_digits: Minimum number of hex digits (default: TASK_ID_MIN_DIGITS)

    Returns:
        Unique hex ID string (e.g., "a3f0", "1b2c", "9a4f1")

    Tries TASK_ID_MAX_ATTEMPTS random ids per width before adding a digit.
    """
    digits = min_digits

    while True:
        for _ in range(TASK_ID_MAX_ATTEMPTS):
            task_id = format(random.randint(0, 16**digits - 1), f"0{digits}x")
            if task_id not in existing_ids:
                existing_ids.add(task_id)
                return task_id

        digits += 1

