"""Unit tests for decorator parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from gc_events.decorator import parse_datestamp, parse_decorator
from gc_events.errors import DecoratorError


class TestUnifiedDecorator:
    """Tests for unified (JDK 9+) decorators."""

    def test_uptime_level_tags(self):
        decorator, body = parse_decorator('[0.006s][info][gc] Using Shenandoah')
        assert decorator.style == 'unified'
        assert decorator.uptime_millis == 6
        assert decorator.level == 'info'
        assert decorator.tags == 'gc'
        assert body == 'Using Shenandoah'

    def test_padded_tags(self):
        decorator, body = parse_decorator('[0.005s][info][gc     ] Using Shenandoah')
        assert decorator.tags == 'gc'
        assert body == 'Using Shenandoah'

    def test_datestamp_and_millis(self):
        decorator, body = parse_decorator('[2019-02-05T14:47:31.092-0200][4ms] Using Shenandoah')
        assert decorator.uptime_millis == 4
        assert decorator.datestamp == datetime(
            2019, 2, 5, 14, 47, 31, 92000, tzinfo=timezone(timedelta(hours=-2))
        )
        assert body == 'Using Shenandoah'

    def test_millis_field_wins_over_seconds(self):
        decorator, _ = parse_decorator('[0.049s][51ms][info][gc] Using G1')
        assert decorator.uptime_millis == 51

    def test_epoch_millis_kept_as_datestamp(self):
        decorator, body = parse_decorator('[0.049s][1549384051092ms][info][gc] Using G1')
        assert decorator.uptime_millis == 49
        assert decorator.datestamp == datetime(2019, 2, 5, 16, 27, 31, 92000, tzinfo=timezone.utc)
        assert body == 'Using G1'

    def test_epoch_millis_does_not_replace_datestamp(self):
        decorator, _ = parse_decorator('[2019-02-05T14:47:31.092-0200][1549384051092ms][4ms] Using G1')
        assert decorator.uptime_millis == 4
        assert decorator.datestamp.utcoffset() == timedelta(hours=-2)

    def test_epoch_nanos_leave_uptime_unset(self):
        decorator, _ = parse_decorator('[1549384051092000000ns][info][gc] Using G1')
        assert decorator.uptime_millis is None
        assert decorator.datestamp.year == 2019

    def test_pid_and_tid(self):
        decorator, body = parse_decorator('[0.049s][12345][12346][info][gc,start] GC(0) Pause Young (Normal)')
        assert decorator.pid == 12345
        assert decorator.tid == 12346
        assert decorator.tags == 'gc,start'
        assert body == 'GC(0) Pause Young (Normal)'

    def test_nanosecond_uptime(self):
        decorator, _ = parse_decorator('[49000000ns][info][gc] Using G1')
        assert decorator.uptime_millis == 49

    def test_comma_decimal_separator(self):
        decorator, _ = parse_decorator('[1,234s][info][gc] Using G1')
        assert decorator.uptime_millis == 1234

    def test_malformed_uptime_raises(self):
        with pytest.raises(DecoratorError):
            parse_decorator('[0.0.49s][info][gc] Using G1')

    def test_impossible_date_raises(self):
        with pytest.raises(DecoratorError):
            parse_decorator('[2019-13-45T14:47:31.092-0200][4ms] Using Shenandoah')


class TestLegacyDecorator:
    """Tests for legacy (JDK 8 and earlier) decorators."""

    def test_uptime_only(self):
        decorator, body = parse_decorator('1.234: [GC (Allocation Failure) 1.234: [ParNew')
        assert decorator.style == 'legacy'
        assert decorator.uptime_millis == 1234
        assert decorator.datestamp is None
        assert body == '[GC (Allocation Failure) 1.234: [ParNew'

    def test_datestamp_and_uptime(self):
        decorator, body = parse_decorator(
            '2016-10-18T09:12:01.234+0200: 0.512: [GC pause (G1 Evacuation Pause) (young), 0.0123456 secs]'
        )
        assert decorator.uptime_millis == 512
        assert decorator.datestamp.year == 2016
        assert decorator.datestamp.utcoffset() == timedelta(hours=2)
        assert body.startswith('[GC pause')

    def test_datestamp_only(self):
        decorator, body = parse_decorator('2016-10-18T09:12:01.234+0200: [CMS-concurrent-mark-start]')
        assert decorator.uptime_millis is None
        assert decorator.datestamp is not None
        assert body == '[CMS-concurrent-mark-start]'

    def test_broken_uptime_raises(self):
        with pytest.raises(DecoratorError):
            parse_decorator('1.2.3: [GC (Allocation Failure)  1024K->512K(2048K), 0.0010000 secs]')


class TestUndecorated:
    """Lines with no decorator at all."""

    def test_plain_header(self):
        decorator, body = parse_decorator('CommandLine flags: -XX:+UseG1GC')
        assert decorator is None
        assert body == 'CommandLine flags: -XX:+UseG1GC'

    def test_bracketed_legacy_body(self):
        decorator, body = parse_decorator('[CMS-concurrent-mark-start]')
        assert decorator is None
        assert body == '[CMS-concurrent-mark-start]'

    def test_continuation_fragment(self):
        decorator, _ = parse_decorator(': 974K->128K(1152K), 0.0012345 secs]')
        assert decorator is None

    def test_parse_datestamp_without_zone(self):
        assert parse_datestamp('2019-02-05T14:47:31,092') == datetime(2019, 2, 5, 14, 47, 31, 92000)
