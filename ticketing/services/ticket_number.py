"""
Ticket number generation.

A ticket number is the 6-digit public identifier printed on the ticket and
encoded in its QR code, drawn uniformly from [100000, 999999].

The existence check done here is advisory only. Two concurrent creations can
both see a candidate as free; the unique constraints in the booking store
turn that race into an IntegrityError, and the booking service answers it by
retrying the whole creation with a fresh number.

With 900,000 possible values collisions stay rare until the registry is
nearly full, so sampling is bounded by `max_attempts` instead of looping
forever on a saturated space.
"""

import re
import secrets
from typing import Callable, Protocol

from ticketing.core.errors import CapacityExhaustedError
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_collision

logger = get_logger(__name__)

TICKET_NUMBER_MIN = 100000
TICKET_NUMBER_MAX = 999999
TICKET_NUMBER_PATTERN = re.compile(r"^[0-9]{6}$")


def is_ticket_number(value: str) -> bool:
    return bool(TICKET_NUMBER_PATTERN.match(value or ""))


class TicketNumberLookup(Protocol):
    async def ticket_number_exists(self, ticket_number: str) -> bool: ...


class TicketNumberGenerator:
    def __init__(
        self,
        max_attempts: int = 50,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self._randbelow = randbelow

    def sample(self) -> str:
        span = TICKET_NUMBER_MAX - TICKET_NUMBER_MIN + 1
        return str(TICKET_NUMBER_MIN + self._randbelow(span))

    async def generate(self, store: TicketNumberLookup) -> str:
        """
        Return a ticket number the store has never issued.

        Raises:
            CapacityExhaustedError: no free number found in max_attempts samples
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.sample()
            if not await store.ticket_number_exists(candidate):
                return candidate

            record_collision("generate")
            logger.info("ticket_number_collision", stage="generate", attempt=attempt)

        logger.error("ticket_number_space_exhausted", attempts=self.max_attempts)
        raise CapacityExhaustedError(
            "No free ticket number could be allocated. Please try again later."
        )
