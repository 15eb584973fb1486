"""Account number generation.

Format: last 8 digits of the millisecond clock + 6 random digits (14 digits).
Uniqueness is checked by the caller against the store; the DB unique
constraint is the final guard.
"""

import random
import time


def generate_account_number() -> str:
    timestamp = str(time.time_ns() // 1_000_000)
    random_part = str(random.randint(100_000, 999_999))
    return f"{timestamp[-8:]}{random_part}"
