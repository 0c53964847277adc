# fleetstore/Core/clock.py

"""
Clock collaborator.

Supplies the current time for retention cutoffs and elapsed-time logging,
and performs the cooperative pauses between per-device sweeps. Tests
replace it with a fake that records sleeps instead of blocking.
"""

import time


class SystemClock:
    """Wall clock backed by the time module."""

    def now_sec(self) -> int:
        return int(time.time())

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
