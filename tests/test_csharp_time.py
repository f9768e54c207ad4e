from datetime import datetime, timedelta, timezone

from csharp_time import CSHARP_EPOCH, csharp_now, csharp_to_datetime, datetime_to_csharp


def test_epoch():
    assert csharp_to_datetime(0) == CSHARP_EPOCH == datetime(1, 1, 1)
    assert datetime_to_csharp(datetime(1, 1, 1)) == 0


def test_blueprint_timestamp():
    assert csharp_to_datetime(638391476082347356) == datetime(2023, 12, 26, 0, 33, 28, 234735)


def test_sub_microsecond_ticks_truncated():
    ticks = 638391476082347356
    assert datetime_to_csharp(csharp_to_datetime(ticks)) == 638391476082347350


def test_datetime_round_trip_keeps_microseconds():
    value = datetime(2024, 2, 29, 13, 45, 7, 123456)
    assert csharp_to_datetime(datetime_to_csharp(value)) == value


def test_now_is_recent():
    assert csharp_to_datetime(csharp_now()).year >= 2024


def test_now_is_utc():
    utc = datetime.now(timezone.utc).replace(tzinfo=None)
    assert abs(csharp_to_datetime(csharp_now()) - utc) < timedelta(seconds=5)
