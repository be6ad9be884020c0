"""Unit tests for the pattern registry and classifier."""

import pytest

from gc_events.catalogue import CATALOGUE
from gc_events.errors import RegistryConflictError
from gc_events.models import EventType
from gc_events.registry import (
    Classification,
    FieldKind,
    PatternEntry,
    Registry,
    Unrecognized,
    infer_field_kind,
)

PAR_NEW_TRIGGERED = (
    '1.234: [GC (Allocation Failure) 1.234: [ParNew: 974K->128K(1152K), 0.0012345 secs] '
    '974K->518K(2112K), 0.0013456 secs] [Times: user=0.01 sys=0.00, real=0.00 secs]'
)


def banner(name, guard, regex, **kwargs):
    return PatternEntry.build(name, EventType.USING_G1, guard, regex, **kwargs)


class TestPatternEntry:
    """Tests for PatternEntry.build() field recipes."""

    def test_field_kinds_inferred_from_group_names(self):
        assert infer_field_kind('young_occupancy_init_kb') is FieldKind.KILOBYTES
        assert infer_field_kind('duration_micros') is FieldKind.MICROS
        assert infer_field_kind('time_user_centis') is FieldKind.CENTIS
        assert infer_field_kind('gc_id') is FieldKind.INTEGER
        assert infer_field_kind('trigger') is FieldKind.TEXT

    def test_fields_follow_pattern_order(self):
        entry = banner('e', 'Using ', r'Using (?P<b_kb>\d+K) (?P<a_micros>\d+ms)')
        assert [field_spec.name for field_spec in entry.fields] == ['b_kb', 'a_micros']
        assert entry.layout == frozenset({'a_micros', 'b_kb'})

    def test_guard_checked_before_pattern(self):
        entry = banner('e', 'Shenandoah', r'Using .*')
        assert entry.match('Using G1') is None
        assert entry.match('Using Shenandoah') is not None

    def test_pattern_must_match_whole_body(self):
        entry = banner('e', 'Using ', r'Using G1')
        assert entry.match('Using G1 collector') is None


class TestRegistryValidation:
    """Conflicts are rejected when the registry is built."""

    def test_builtin_catalogue_is_consistent(self, registry):
        assert len(registry) == len(CATALOGUE)
        assert registry.validate_examples() == []

    def test_duplicate_name_rejected(self):
        entry = banner('dup', 'Using G1', r'Using G1')
        with pytest.raises(RegistryConflictError, match='Duplicate'):
            Registry([entry, entry])

    def test_precedes_unknown_entry_rejected(self):
        with pytest.raises(RegistryConflictError, match='unknown'):
            Registry([banner('a', 'Using G1', r'Using G1', precedes=['missing'])])

    def test_precedes_must_point_forward(self):
        entries = [
            banner('b', 'Using Z', r'Using Z'),
            banner('a', 'Using G1', r'Using G1', precedes=['b']),
        ]
        with pytest.raises(RegistryConflictError, match='must come before'):
            Registry(entries)

    def test_shared_guard_with_different_fields_rejected(self):
        entries = [
            banner('named', 'Using ', r'Using (?P<collector>\w+)'),
            banner('plain', 'Using ', r'Using Serial'),
        ]
        with pytest.raises(RegistryConflictError, match='share guard'):
            Registry(entries)

    def test_overlapping_examples_rejected(self):
        entries = [
            banner('broad', 'Using', r'Using \w+', examples=['Using Epsilon']),
            banner('narrow', 'G1', r'Using G1', examples=['Using G1']),
        ]
        with pytest.raises(RegistryConflictError, match='both match'):
            Registry(entries)

    def test_declared_order_resolves_overlap(self):
        entries = [
            banner('narrow', 'G1', r'Using G1', precedes=['broad'], examples=['Using G1']),
            banner('broad', 'Using', r'Using \w+', examples=['Using Epsilon']),
        ]
        registry = Registry(entries)
        assert registry.match_body('Using G1')[0].name == 'narrow'
        assert registry.match_body('Using Epsilon')[0].name == 'broad'
        assert registry.validate_examples() == []

    def test_validate_examples_reports_misses(self):
        registry = Registry([banner('a', 'Using G1', r'Using G1', examples=['Using G2'])])
        assert registry.validate_examples() == ["a: no entry matches 'Using G2'"]


class TestClassify:
    """Tests for Registry.classify()."""

    def test_known_trigger_wins_over_fallback(self, registry):
        result = registry.classify(PAR_NEW_TRIGGERED)
        assert isinstance(result, Classification)
        assert result.entry.name == 'par_new'
        assert result.event_type is EventType.PAR_NEW
        assert result.captures['trigger'] == 'Allocation Failure'
        assert result.decorator.uptime_millis == 1234

    def test_unknown_trigger_kept_verbatim(self, registry):
        line = PAR_NEW_TRIGGERED.replace('Allocation Failure', 'Brand New Reason')
        result = registry.classify(line)
        assert result.entry.name == 'par_new_any'
        assert result.captures['trigger'] == 'Brand New Reason'

    def test_unknown_trigger_with_call_parens(self, registry):
        result = registry.classify('[Full GC (Custom.trigger())  5192K->5003K(125952K), 0.0456789 secs]')
        assert result.entry.name == 'verbose_gc_old_any'
        assert result.captures['trigger'] == 'Custom.trigger()'

    def test_untriggered_fallback_has_no_trigger(self, registry):
        result = registry.classify('[GC 33280K->5192K(125952K), 0.0042345 secs]')
        assert result.entry.name == 'verbose_gc_young_any'
        assert 'trigger' not in result.captures

    def test_untriggered_line(self, registry):
        result = registry.classify(
            '1.234: [GC 1.234: [ParNew: 974K->128K(1152K), 0.0012345 secs] 974K->518K(2112K), 0.0013456 secs]'
        )
        assert result.entry.name == 'par_new_any'
        assert result.event_type is EventType.PAR_NEW

    def test_trailing_whitespace_ignored(self, registry):
        result = registry.classify('[0.006s][info][gc] Using Shenandoah   ')
        assert result.event_type is EventType.USING_SHENANDOAH

    def test_unmatched_line(self, registry):
        result = registry.classify('this is not a gc line')
        assert isinstance(result, Unrecognized)
        assert result.reason == 'no pattern matched'

    def test_malformed_decorator_is_unrecognized(self, registry):
        result = registry.classify('[0.0.49s][info][gc] Using G1')
        assert isinstance(result, Unrecognized)
        assert 'Malformed decorator field' in result.reason

    def test_optional_groups_left_out_of_captures(self, registry):
        result = registry.classify('[0.500s][info][gc] GC(1) Pause Young (G1 Evacuation Pause) 24M->4M(256M) 3.130ms')
        assert result.entry.name == 'unified_young'
        assert 'time_user_centis' not in result.captures
        assert result.captures['gc_id'] == '1'

    def test_g1_young_detail_before_generic_young(self, registry):
        result = registry.classify(
            '[0.500s][info][gc] GC(1) Pause Young (Normal) (G1 Evacuation Pause) 24M->4M(256M) 3.130ms'
        )
        assert result.event_type is EventType.UNIFIED_G1_YOUNG_PAUSE

    def test_header_flags_kept_verbatim(self, registry):
        flags = '-XX:InitialHeapSize=13958643712 -XX:+UseConcMarkSweepGC'
        result = registry.classify(f'CommandLine flags: {flags}')
        assert result.event_type is EventType.HEADER_COMMAND_LINE_FLAGS
        assert result.decorator is None
        assert result.captures['jvm_options'] == flags

    @pytest.mark.parametrize('line', [
        '[0.006s][info][gc] Using Shenandoah',
        '[2019-02-05T14:47:31.092-0200][4ms] Using Shenandoah',
        '[0.005s][info][gc     ] Using Shenandoah',
    ])
    def test_banner_with_each_decorator_style(self, registry, line):
        assert registry.classify(line).event_type is EventType.USING_SHENANDOAH

    def test_lookup_by_name(self, registry):
        entry = registry.get('par_new_any')
        assert entry.event_type is EventType.PAR_NEW
        assert registry.entries.index(registry.get('par_new')) < registry.entries.index(entry)
