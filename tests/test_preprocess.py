"""Unit tests for multi-line reassembly."""

import logging

from gc_events.preprocess import Preprocessor


def feed_all(lines, preprocessor=None):
    preprocessor = preprocessor or Preprocessor()
    out = []
    for number, line in enumerate(lines, start=1):
        out.extend(preprocessor.feed(line, number))
    out.extend(preprocessor.finish())
    return out, preprocessor


UNIFIED_PARNEW = [
    '[0.052s][info][gc,start     ] GC(0) Pause Young (Allocation Failure)',
    '[0.052s][info][gc,task      ] GC(0) Using 2 workers of 2 for evacuation',
    '[0.056s][info][gc,heap      ] GC(0) ParNew: 974K->128K(1152K)',
    '[0.056s][info][gc,heap      ] GC(0) CMS: 0K->518K(960K)',
    '[0.056s][info][gc,metaspace ] GC(0) Metaspace: 250K->250K(1056768K)',
    '[0.056s][info][gc           ] GC(0) Pause Young (Allocation Failure) 0M->0M(2M) 3.544ms',
    '[0.056s][info][gc,cpu       ] GC(0) User=0.01s Sys=0.01s Real=0.01s',
]

G1_FULL = [
    '[0.300s][info][gc,start      ] GC(3) Pause Full (System.gc())',
    '[0.300s][info][gc,phases,start] GC(3) Phase 1: Mark live objects',
    '[0.305s][info][gc,heap       ] GC(3) Eden regions: 1->0(3)',
    '[0.305s][info][gc,metaspace  ] GC(3) Metaspace: 3801K->3801K(1056768K)',
    '[0.305s][info][gc            ] GC(3) Pause Full (System.gc()) 5M->1M(20M) 7.521ms',
    '[0.305s][info][gc,cpu        ] GC(3) User=0.02s Sys=0.00s Real=0.01s',
]

G1_YOUNG_JDK10 = [
    '[0.011s][info][gc,start     ] GC(0) Pause Young (G1 Evacuation Pause)',
    '[0.011s][info][gc,task      ] GC(0) Using 2 workers of 4 for evacuation',
    '[0.016s][info][gc,heap      ] GC(0) Eden regions: 24->0(23)',
    '[0.016s][info][gc,metaspace ] GC(0) Metaspace: 3801K->3801K(1056768K)',
    '[0.016s][info][gc           ] GC(0) Pause Young (G1 Evacuation Pause) 24M->4M(256M) 3.130ms',
    '[0.016s][info][gc,cpu       ] GC(0) User=0.02s Sys=0.00s Real=0.01s',
]

LEGACY_PARNEW_HEAD = '1.234: [GC (Allocation Failure) 1.234: [ParNew'
LEGACY_PARNEW_TAIL = (
    ': 974K->128K(1152K), 0.0012345 secs] 974K->518K(2112K), 0.0013456 secs] '
    '[Times: user=0.01 sys=0.00, real=0.00 secs]'
)


class TestUnifiedReassembly:
    """GC(n)-keyed reassembly of unified logging."""

    def test_parnew_fragments_joined(self):
        out, _ = feed_all(UNIFIED_PARNEW)
        assert len(out) == 1
        assert out[0].text == (
            '[0.052s][info][gc,start     ] GC(0) Pause Young (Allocation Failure) '
            'ParNew: 974K->128K(1152K) CMS: 0K->518K(960K) Metaspace: 250K->250K(1056768K) '
            '0M->0M(2M) 3.544ms User=0.01s Sys=0.01s Real=0.01s'
        )
        assert out[0].line_number == 1

    def test_event_emitted_as_soon_as_cpu_line_arrives(self):
        preprocessor = Preprocessor()
        results = [preprocessor.feed(line, n) for n, line in enumerate(UNIFIED_PARNEW, start=1)]
        assert all(not r for r in results[:-1])
        assert len(results[-1]) == 1

    def test_summary_without_cpu_line_closed_by_next_line(self):
        lines = UNIFIED_PARNEW[:-1] + ['[0.100s][info][gc] Using Concurrent Mark Sweep']
        out, _ = feed_all(lines)
        assert [line.text.endswith('3.544ms') for line in out] == [True, False]

    def test_summary_without_cpu_line_flushed_at_finish(self):
        out, preprocessor = feed_all(UNIFIED_PARNEW[:-1])
        assert len(out) == 1
        assert out[0].text.endswith('0M->0M(2M) 3.544ms')
        assert preprocessor.take_incomplete() == []

    def test_summary_only_logging_picks_up_cpu_line(self):
        out, _ = feed_all([
            '[0.500s][info][gc     ] GC(3) Pause Young (Allocation Failure) 1M->0M(2M) 1.000ms',
            '[0.500s][info][gc,cpu ] GC(3) User=0.00s Sys=0.00s Real=0.00s',
        ])
        assert [line.text for line in out] == [
            '[0.500s][info][gc     ] GC(3) Pause Young (Allocation Failure) 1M->0M(2M) 1.000ms '
            'User=0.00s Sys=0.00s Real=0.00s'
        ]

    def test_output_follows_first_fragment_order(self):
        lines = [
            '[0.010s][info][gc,start] GC(5) Pause Full (System.gc())',
            '[0.011s][info][gc] Using G1',
            '[0.020s][info][gc] GC(5) Pause Full (System.gc()) 5M->1M(20M) 7.521ms',
        ]
        preprocessor = Preprocessor()
        assert preprocessor.feed(lines[0], 1) == []
        assert preprocessor.feed(lines[1], 2) == []
        assert preprocessor.feed(lines[2], 3) == []
        out = preprocessor.finish()
        assert [line.line_number for line in out] == [1, 2]
        assert out[0].text.endswith('GC(5) Pause Full (System.gc()) 5M->1M(20M) 7.521ms')

    def test_reopened_id_abandons_earlier_event(self):
        lines = [
            '[0.010s][info][gc,start] GC(7) Pause Young (Allocation Failure)',
            '[0.011s][info][gc,heap ] GC(7) DefNew: 1022K->127K(1152K)',
            '[0.020s][info][gc,start] GC(7) Pause Young (Allocation Failure)',
        ]
        out, preprocessor = feed_all(lines)
        incomplete = preprocessor.take_incomplete()
        assert out == []
        assert len(incomplete) == 2
        assert incomplete[0].kind == 'incomplete'
        assert incomplete[0].line_number == 1
        assert 'superseded' in incomplete[0].detail
        assert 'end of input' in incomplete[1].detail

    def test_jdk17_metaspace_line_normalized(self):
        lines = [
            '[0.011s][info][gc,start    ] GC(0) Pause Young (Normal) (G1 Evacuation Pause)',
            '[0.016s][info][gc,metaspace] GC(0) Metaspace: 3801K(4032K)->3801K(4032K) '
            'NonClass: 3377K(3520K)->3377K(3520K) Class: 423K(512K)->423K(512K)',
            '[0.016s][info][gc          ] GC(0) Pause Young (Normal) (G1 Evacuation Pause) 25M->4M(256M) 5.123ms',
        ]
        out, _ = feed_all(lines)
        assert out[0].text == (
            '[0.011s][info][gc,start    ] GC(0) Pause Young (Normal) (G1 Evacuation Pause) '
            'Metaspace: 3801K->3801K(4032K) 25M->4M(256M) 5.123ms'
        )

    def test_startup_and_exit_noise_dropped(self):
        out, _ = feed_all([
            '[0.004s][info][gc,init] CPUs: 8 total, 8 available',
            '[0.004s][info][gc,init] Heap Region Size: 1M',
            '[0.600s][info][gc,heap,exit] Heap',
            '[0.600s][info][gc,heap,exit]  garbage-first heap   total 262144K, used 53248K',
        ])
        assert out == []

    def test_g1_full_gc_with_metaspace_joined(self):
        out, _ = feed_all(G1_FULL)
        assert [line.text for line in out] == [
            '[0.300s][info][gc,start      ] GC(3) Pause Full (System.gc()) '
            'Metaspace: 3801K->3801K(1056768K) 5M->1M(20M) 7.521ms User=0.02s Sys=0.00s Real=0.01s'
        ]

    def test_jdk10_g1_young_with_metaspace_joined(self):
        out, _ = feed_all(G1_YOUNG_JDK10)
        assert [line.text for line in out] == [
            '[0.011s][info][gc,start     ] GC(0) Pause Young (G1 Evacuation Pause) '
            'Metaspace: 3801K->3801K(1056768K) 24M->4M(256M) 3.130ms User=0.02s Sys=0.00s Real=0.01s'
        ]

    def test_dropped_detail_line_logged_with_text(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='gc_events.preprocess'):
            feed_all(G1_FULL)
        assert 'Dropped detail line 2 for gc:3: Phase 1: Mark live objects' in caplog.text


class TestLegacyReassembly:
    """Legacy ParNew/DefNew and G1 multi-line events."""

    def test_parnew_split_joined(self):
        out, _ = feed_all([LEGACY_PARNEW_HEAD, LEGACY_PARNEW_TAIL])
        assert [line.text for line in out] == [LEGACY_PARNEW_HEAD + LEGACY_PARNEW_TAIL]

    def test_tenuring_banner_between_fragments_ignored(self):
        plain, _ = feed_all([LEGACY_PARNEW_HEAD, LEGACY_PARNEW_TAIL])
        interleaved, _ = feed_all([
            LEGACY_PARNEW_HEAD,
            'Desired survivor size 56688640 bytes, new threshold 6 (max 6)',
            '- age   1:     123456 bytes,     123456 total',
            LEGACY_PARNEW_TAIL,
        ])
        assert [line.text for line in interleaved] == [line.text for line in plain]

    def test_embedded_concurrent_fragment_split_out(self):
        out, _ = feed_all([
            '1.234: [GC (Allocation Failure) 1.234: [ParNew1.240: [CMS-concurrent-abortable-preclean: '
            '0.123/0.456 secs] [Times: user=0.10 sys=0.00, real=0.05 secs]',
            LEGACY_PARNEW_TAIL,
        ])
        assert [line.text for line in out] == [
            LEGACY_PARNEW_HEAD + LEGACY_PARNEW_TAIL,
            '1.240: [CMS-concurrent-abortable-preclean: 0.123/0.456 secs] '
            '[Times: user=0.10 sys=0.00, real=0.05 secs]',
        ]

    def test_g1_details_joined(self):
        out, _ = feed_all([
            '0.512: [GC pause (G1 Evacuation Pause) (young), 0.0123456 secs]',
            '   [Parallel Time: 10.2 ms, GC Workers: 4]',
            '   [Eden: 24.0M(24.0M)->0.0B(23.0M) Survivors: 0.0B->3072.0K Heap: 24.0M(256.0M)->3951.0K(256.0M)]',
            ' [Times: user=0.02 sys=0.00, real=0.01 secs]',
        ])
        assert [line.text for line in out] == [
            '0.512: [GC pause (G1 Evacuation Pause) (young), 0.0123456 secs]'
            '[Eden: 24.0M(24.0M)->0.0B(23.0M) Survivors: 0.0B->3072.0K Heap: 24.0M(256.0M)->3951.0K(256.0M)]'
            ' [Times: user=0.02 sys=0.00, real=0.01 secs]'
        ]

    def test_heap_dump_block_dropped(self):
        out, _ = feed_all([
            '{Heap before GC invocations=1 (full 0):',
            ' par new generation   total 1152K, used 974K',
            'Heap after GC invocations=2 (full 0):',
            '}',
            '',
        ])
        assert out == []

    def test_unterminated_parnew_reported_incomplete(self):
        out, preprocessor = feed_all([LEGACY_PARNEW_HEAD])
        assert out == []
        incomplete = preprocessor.take_incomplete()
        assert [d.line for d in incomplete] == [LEGACY_PARNEW_HEAD]

    def test_incomplete_reporting_can_be_disabled(self):
        _, preprocessor = feed_all([LEGACY_PARNEW_HEAD], Preprocessor(report_incomplete=False))
        assert preprocessor.take_incomplete() == []

    def test_single_line_events_pass_through(self):
        lines = [
            '2.346: [CMS-concurrent-mark-start]',
            'CommandLine flags: -XX:+UseConcMarkSweepGC',
        ]
        out, _ = feed_all(lines)
        assert [line.text for line in out] == lines
        assert [line.line_number for line in out] == [1, 2]

    def test_stray_indented_line_logged_with_text(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='gc_events.preprocess'):
            out, _ = feed_all(['   [Parallel Time: 10.2 ms, GC Workers: 4]'])
        assert out == []
        assert 'Dropped indented line 1: [Parallel Time: 10.2 ms, GC Workers: 4]' in caplog.text
