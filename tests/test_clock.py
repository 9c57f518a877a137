from datetime import datetime, timedelta, timezone

from ctxdaemon import clock


def test_now_is_utc_aware():
    stamp = clock.now()
    assert stamp.tzinfo is not None
    assert stamp.utcoffset() == timedelta(0)


def test_now_falls_between_reference_readings():
    before = datetime.now(timezone.utc)
    stamp = clock.now()
    after = datetime.now(timezone.utc)
    assert before <= stamp <= after


def test_now_is_monotonic_enough_across_calls():
    first = clock.now()
    second = clock.now()
    assert second >= first