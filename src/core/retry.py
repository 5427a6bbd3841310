"""
Fixed-interval polling with a deadline.

Used for container readiness checks. The clock and sleep functions are
injectable so the loop can be exercised without real delays.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Poll a condition at a fixed interval until it holds or a deadline passes.

    Attributes:
        interval: Seconds to sleep between attempts
        timeout: Seconds after the first attempt at which polling gives up
        clock: Monotonic time source
        sleep: Sleep function
    """

    interval: float = 0.5
    timeout: float = 30.0
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def poll(self, condition: Callable[[], bool]) -> bool:
        """
        Evaluate condition until it returns True or the deadline passes.

        Exceptions raised by condition are not caught; they abort polling
        immediately.

        Args:
            condition: Zero-argument predicate

        Returns:
            True if the condition held, False on timeout
        """
        start = self.clock()
        attempts = 0
        while True:
            attempts += 1
            if condition():
                logger.debug(f"Condition met after {attempts} attempt(s)")
                return True

            if self.clock() - start + self.interval > self.timeout:
                logger.debug(f"Condition not met after {attempts} attempt(s), giving up")
                return False

            self.sleep(self.interval)
