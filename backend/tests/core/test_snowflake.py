"""Tests for SnowflakeGenerator — layout, ordering, overflow, and clock regression."""

from datetime import datetime, timedelta, timezone

import pytest

from buildshare.core.snowflake import (
    DEFAULT_EPOCH, MAX_SEQUENCE, MAX_WORKER_ID, ClockRegressionError,
    SequenceOverflowError, SnowflakeGenerator, parse_snowflake,
)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc))


def test_fields_round_trip_through_parse(clock):
    gen = SnowflakeGenerator(worker_id=5, clock=clock)
    parts = parse_snowflake(gen.next_id())
    assert parts.worker_id == 5
    assert parts.sequence == 0
    assert parts.created_at(DEFAULT_EPOCH) == clock.now


def test_ids_strictly_increase_within_and_across_milliseconds(clock):
    gen = SnowflakeGenerator(worker_id=1, clock=clock)
    ids = [gen.next_id() for _ in range(5)]
    clock.advance(milliseconds=1)
    ids.append(gen.next_id())
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert parse_snowflake(ids[-1]).sequence == 0


def test_ids_fit_signed_64_bit(clock):
    assert 0 < SnowflakeGenerator(MAX_WORKER_ID, clock=clock).next_id() < 2 ** 63


def test_different_workers_never_collide(clock):
    a = SnowflakeGenerator(worker_id=1, clock=clock)
    b = SnowflakeGenerator(worker_id=2, clock=clock)
    assert a.next_id() != b.next_id()


def test_sequence_overflow_within_one_millisecond(clock):
    gen = SnowflakeGenerator(worker_id=0, clock=clock)
    for _ in range(MAX_SEQUENCE + 1):
        gen.next_id()
    with pytest.raises(SequenceOverflowError):
        gen.next_id()
    clock.advance(milliseconds=1)
    assert parse_snowflake(gen.next_id()).sequence == 0


def test_clock_moving_backwards_raises(clock):
    gen = SnowflakeGenerator(worker_id=0, clock=clock)
    gen.next_id()
    clock.advance(milliseconds=-5)
    with pytest.raises(ClockRegressionError):
        gen.next_id()


def test_clock_before_epoch_raises():
    gen = SnowflakeGenerator(
        worker_id=0, clock=lambda: DEFAULT_EPOCH - timedelta(seconds=1),
    )
    with pytest.raises(ClockRegressionError):
        gen.next_id()


def test_invalid_worker_id_rejected():
    with pytest.raises(ValueError):
        SnowflakeGenerator(worker_id=MAX_WORKER_ID + 1)
    with pytest.raises(ValueError):
        SnowflakeGenerator(worker_id=-1)


def test_naive_epoch_rejected():
    with pytest.raises(ValueError):
        SnowflakeGenerator(worker_id=0, epoch=datetime(2024, 1, 1))
