"""Snowflake Generator — time-ordered 63-bit identifiers (timestamp + worker + sequence).

Invariants:
    - Layout: 41 bits milliseconds since epoch | 10 bits worker id | 12 bits sequence
    - Identifiers from one generator are strictly increasing
    - Two generators with different worker ids never produce the same identifier
    - Sequence exhaustion within one millisecond raises SequenceOverflowError
    - A clock moving backwards raises ClockRegressionError (no identifier reuse)

Design Decisions:
    - The clock is injected so tests can drive time explicitly
    - State mutates synchronously inside next_id(); callers never await mid-update
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

TIMESTAMP_BITS = 41
WORKER_BITS = 10
SEQUENCE_BITS = 12

MAX_WORKER_ID = (1 << WORKER_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1
MAX_TIMESTAMP = (1 << TIMESTAMP_BITS) - 1

WORKER_SHIFT = SEQUENCE_BITS
TIMESTAMP_SHIFT = SEQUENCE_BITS + WORKER_BITS

DEFAULT_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SequenceOverflowError(RuntimeError):
    """More than MAX_SEQUENCE + 1 identifiers were requested within one millisecond."""


class ClockRegressionError(RuntimeError):
    """The clock reported a time earlier than the last generated identifier."""


@dataclass(frozen=True)
class SnowflakeParts:
    """Decomposed identifier fields."""
    timestamp_ms: int
    worker_id: int
    sequence: int

    def created_at(self, epoch: datetime = DEFAULT_EPOCH) -> datetime:
        return datetime.fromtimestamp(
            epoch.timestamp() + self.timestamp_ms / 1000, tz=timezone.utc,
        )


class SnowflakeGenerator:
    """Generates identifiers for one worker."""

    def __init__(
        self,
        worker_id: int,
        epoch: datetime = DEFAULT_EPOCH,
        clock: Clock = utc_now,
    ):
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise ValueError(
                f"worker_id must be between 0 and {MAX_WORKER_ID}, got {worker_id}"
            )
        if epoch.tzinfo is None:
            raise ValueError("epoch must be timezone-aware")
        self.worker_id = worker_id
        self.epoch = epoch
        self._clock = clock
        self._last_timestamp = -1
        self._sequence = 0

    def _elapsed_ms(self) -> int:
        elapsed = int((self._clock() - self.epoch).total_seconds() * 1000)
        if elapsed < 0:
            raise ClockRegressionError("Clock is set before the generator epoch")
        if elapsed > MAX_TIMESTAMP:
            raise OverflowError("Timestamp exceeds the 41-bit identifier range")
        return elapsed

    def next_id(self) -> int:
        timestamp = self._elapsed_ms()
        if timestamp < self._last_timestamp:
            raise ClockRegressionError(
                f"Clock moved backwards by {self._last_timestamp - timestamp} ms"
            )
        if timestamp == self._last_timestamp:
            if self._sequence >= MAX_SEQUENCE:
                raise SequenceOverflowError(
                    f"Sequence exhausted for millisecond {timestamp}"
                )
            self._sequence += 1
        else:
            self._sequence = 0
            self._last_timestamp = timestamp
        return (
            (timestamp << TIMESTAMP_SHIFT)
            | (self.worker_id << WORKER_SHIFT)
            | self._sequence
        )


def parse_snowflake(identifier: int) -> SnowflakeParts:
    """Split an identifier into timestamp, worker id, and sequence."""
    if identifier < 0:
        raise ValueError(f"Identifier must be non-negative, got {identifier}")
    return SnowflakeParts(
        timestamp_ms=identifier >> TIMESTAMP_SHIFT,
        worker_id=(identifier >> WORKER_SHIFT) & MAX_WORKER_ID,
        sequence=identifier & MAX_SEQUENCE,
    )
