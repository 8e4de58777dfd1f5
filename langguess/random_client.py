"""
- HTTP call with clear fallback
Get one random index in [0, upper) from random.org. If anything goes wrong (no internet,
timeout, bad response), we fall back to a local secure random generator so the pick still happens.
"""

from secrets import randbelow

import requests
import structlog

RANDOM_URL = "https://www.random.org/integers/"

logger = structlog.get_logger(__name__)


def fetch_index(upper: int, use_remote: bool = True) -> int:
    if upper < 1:
        raise ValueError("Need at least one option to choose from.")
    if not use_remote or upper == 1:
        return randbelow(upper)

    params = {
        "num": 1,
        "min": 0,
        "max": upper - 1,
        "col": 1,
        "base": 10,
        "format": "plain",
        "rnd": "new",
    }

    # keep network quick; if it takes too long, we will just fallback
    timeout_seconds = 3.0

    try:
        response = requests.get(RANDOM_URL, params=params, timeout=timeout_seconds)
        response.raise_for_status()

        # The body looks like: "3\n"
        value = int(response.text.strip())
        if value < 0 or value >= upper:
            raise ValueError(f"random.org number {value} out of range 0..{upper - 1}.")
        return value

    except (requests.RequestException, ValueError) as exc:
        logger.warning("random.org unavailable, using local randomness", error=str(exc))
        return randbelow(upper)
