"""Identifier Allocator — snowflake identifiers checked for prior existence.

Invariants:
    - allocate() makes at most max_attempts generation+lookup rounds, then raises
      ConflictError; it never loops unboundedly
    - Generator faults (sequence overflow, clock regression) consume an attempt
    - The lookup is advisory: the UNIQUE/PK constraints on insert remain authoritative
"""

import asyncio
import logging

from buildshare.core.errors import ConflictError, ErrorContext
from buildshare.core.repository_protocols import BuildRecordRepository
from buildshare.core.snowflake import (
    ClockRegressionError, SequenceOverflowError, SnowflakeGenerator,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 8


class IdentifierAllocator:
    """Allocates unused record identifiers."""

    def __init__(
        self,
        generator: SnowflakeGenerator,
        repository: BuildRecordRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._generator = generator
        self._repository = repository
        self.max_attempts = max_attempts

    async def exists(self, identifier: int) -> bool:
        return await self._repository.identifier_exists(identifier)

    async def allocate(self) -> int:
        for attempt in range(1, self.max_attempts + 1):
            try:
                identifier = self._generator.next_id()
            except SequenceOverflowError:
                logger.warning(
                    "Snowflake sequence exhausted, waiting for next millisecond",
                    extra={"operation": "allocate", "attempt": attempt},
                )
                await asyncio.sleep(0.001)
                continue
            except ClockRegressionError as e:
                logger.warning(
                    f"Snowflake clock regression: {e}",
                    extra={"operation": "allocate", "attempt": attempt},
                )
                await asyncio.sleep(0.001)
                continue

            if not await self.exists(identifier):
                return identifier
            logger.warning(
                f"Identifier {identifier} already in use, regenerating",
                extra={
                    "operation": "allocate", "attempt": attempt,
                    "identifier": identifier,
                },
            )

        raise ConflictError(
            f"Could not allocate a unique identifier after {self.max_attempts} attempts",
            ErrorContext(operation="allocate", attempt=self.max_attempts),
        )
