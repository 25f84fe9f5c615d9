"""
File:       tests/test_filters.py
Brief:      Unit tests for the Filter Pipeline.
"""
# Standard library imports
import os
import sys
import unittest

# Third party library imports
from Bio.Seq import reverse_complement

# Local modules imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), r".."))
from blockqc.config import ADAPTERS, MIN_READ_LEN, FilterConfig  # noqa
from blockqc.filters import FilterPipeline, NewMethodQualityFilter, StandardQualityFilter  # noqa
from blockqc.filters import REJECTED_BY_ADAPTER, REJECTED_BY_N, REJECTED_BY_QUALITY, REJECTED_BY_TRIM  # noqa
from blockqc.filters import filter_out_by_adapters, fixed_trim  # noqa
from tests.fastq_data import BAD, GOOD, make_record, make_seq  # noqa


def _assert_consistent(test: unittest.TestCase, record) -> None:
    test.assertEqual(len(record.seq), len(record.qual))
    test.assertEqual(len(record.seq), len(record.nqual))


class TestFixedTrim(unittest.TestCase):
    """Class for automated testing of fixed trimming"""

    def setUp(self) -> None:
        self.record = make_record("r", make_seq(20), list(range(20, 40)))

    def test_trims_both_ends(self):
        trimmed = fixed_trim(self.record, 2, 3)
        self.assertEqual(self.record.seq[2:17], trimmed.seq)
        self.assertEqual(self.record.qual[2:17], trimmed.qual)
        self.assertListEqual(list(range(22, 37)), trimmed.nqual.tolist())

    def test_zero_trim_is_a_no_op(self):
        trimmed = fixed_trim(self.record, 0, 0)
        self.assertEqual(self.record.seq, trimmed.seq)
        self.assertEqual(self.record.qual, trimmed.qual)
        self.assertEqual(fixed_trim(trimmed, 0, 0).seq, trimmed.seq)

    def test_trim5_composes(self):
        twice = fixed_trim(fixed_trim(self.record, 3, 0), 3, 0)
        self.assertEqual(self.record.seq[6:], twice.seq)
        self.assertListEqual(self.record.nqual[6:].tolist(), twice.nqual.tolist())

    def test_trim3_only(self):
        self.assertEqual(self.record.seq[:15], fixed_trim(self.record, 0, 5).seq)

    def test_over_trimming_leaves_an_empty_read(self):
        self.assertEqual(0, len(fixed_trim(self.record, 15, 10)))
        self.assertEqual(0, len(fixed_trim(self.record, 0, 25)))


class TestAdapterFilter(unittest.TestCase):
    """Class for automated testing of the adapter filter"""

    def test_exact_adapters_are_filtered_out(self):
        for adapter in ADAPTERS:
            self.assertTrue(filter_out_by_adapters(adapter, ADAPTERS))

    def test_reverse_complements_are_filtered_out(self):
        for adapter in ADAPTERS:
            rc = reverse_complement(adapter)
            self.assertFalse(any(a in rc for a in ADAPTERS))
            self.assertTrue(filter_out_by_adapters(rc, ADAPTERS))

    def test_embedded_adapter(self):
        sequence = make_seq(20) + ADAPTERS[2] + make_seq(10)
        self.assertTrue(filter_out_by_adapters(sequence, ADAPTERS))

    def test_clean_sequence_passes(self):
        self.assertFalse(filter_out_by_adapters(make_seq(100), ADAPTERS))

    def test_reverse_complement_keeps_n(self):
        self.assertTrue(filter_out_by_adapters("NNAC", ["GTNN"]))


class TestStandardQualityFilter(unittest.TestCase):
    """Class for automated testing of the standard quality algorithm"""

    def setUp(self) -> None:
        self.filter_ = StandardQualityFilter(20)

    def _record(self, scores):
        return make_record("r", make_seq(len(scores)), scores)

    def test_uniform_high_quality_is_kept_whole(self):
        for length in (MIN_READ_LEN, 50, 100):
            record = self._record([GOOD] * length)
            result = self.filter_.apply(record)
            self.assertIsNotNone(result)
            self.assertEqual(record.seq, result.seq)
            self.assertEqual(record.qual, result.qual)

    def test_trims_low_quality_tail(self):
        record = self._record([GOOD] * 40 + [10] * 10)
        result = self.filter_.apply(record)
        self.assertEqual(40, len(result))
        self.assertEqual(record.seq[:40], result.seq)
        _assert_consistent(self, result)

    def test_keeps_last_base_at_threshold(self):
        record = self._record([GOOD] * 40 + [20] + [10] * 9)
        self.assertEqual(41, len(self.filter_.apply(record)))

    def test_mean_must_exceed_threshold(self):
        self.assertIsNone(self.filter_.apply(self._record([20] * 50)))

    def test_too_short_after_trim(self):
        self.assertIsNone(self.filter_.apply(self._record([GOOD] * 30 + [BAD] * 20)))

    def test_three_low_bases_in_a_row(self):
        self.assertIsNone(self.filter_.apply(self._record([GOOD] * 20 + [10] * 3 + [GOOD] * 20)))

    def test_two_low_bases_in_a_row_pass(self):
        record = self._record([GOOD] * 20 + [10] * 2 + [GOOD] * 20)
        self.assertEqual(42, len(self.filter_.apply(record)))

    def test_empty_read(self):
        self.assertIsNone(self.filter_.apply(self._record([])))


class TestNewMethodQualityFilter(unittest.TestCase):
    """Class for automated testing of the new-method quality algorithm"""

    def setUp(self) -> None:
        self.filter_ = NewMethodQualityFilter(20)

    def _record(self, scores):
        return make_record("r", make_seq(len(scores)), scores)

    def test_short_reads_are_always_rejected(self):
        for length in range(0, MIN_READ_LEN + 1):
            self.assertIsNone(self.filter_.apply(self._record([GOOD] * length)), length)

    def test_shortest_accepted_read(self):
        result = self.filter_.apply(self._record([GOOD] * (MIN_READ_LEN + 1)))
        self.assertEqual(MIN_READ_LEN, len(result))

    def test_truncates_at_rightmost_good_window_center(self):
        record = self._record([GOOD] * 50)
        result = self.filter_.apply(record)
        self.assertEqual(49, len(result))
        self.assertEqual(record.seq[:49], result.seq)
        self.assertEqual(record.qual[:49], result.qual)

    def test_low_quality_tail(self):
        result = self.filter_.apply(self._record([GOOD] * 40 + [10] * 10))
        self.assertEqual(39, len(result))
        _assert_consistent(self, result)

    def test_no_good_window_far_enough(self):
        self.assertIsNone(self.filter_.apply(self._record([GOOD] * 30 + [BAD] * 20)))

    def test_mean_checked_after_truncation(self):
        self.assertIsNone(self.filter_.apply(self._record([15] * 35 + [GOOD] * 3)))

    def test_isolated_good_bases_do_not_count(self):
        scores = [GOOD] * 40 + [BAD, GOOD, BAD, GOOD, GOOD, BAD]
        self.assertEqual(39, len(self.filter_.apply(self._record(scores))))


class TestFilterPipeline(unittest.TestCase):
    """Class for automated testing of the whole Filter Pipeline"""

    def test_no_filters_accept_everything(self):
        record = make_record("r", make_seq(10), [BAD] * 10)
        result = FilterPipeline(FilterConfig()).process(record)
        self.assertEqual(record.seq, result.seq)

    def test_fixed_trim_runs_first(self):
        pipeline = FilterPipeline(FilterConfig(trim5=2, trim3=1))
        result = pipeline.process(make_record("r", "ACGTACGT"))
        self.assertEqual("GTACG", result.seq)
        _assert_consistent(self, result)

    def test_fully_trimmed_read_is_rejected(self):
        result, reason = FilterPipeline(FilterConfig(trim5=5)).process_with_reason(make_record("r", "ACGT"))
        self.assertIsNone(result)
        self.assertEqual(REJECTED_BY_TRIM, reason)

    def test_empty_read_is_not_a_trim_rejection(self):
        empty = make_record("r", "")
        for config in (FilterConfig(), FilterConfig(trim5=3, trim3=2)):
            result, reason = FilterPipeline(config).process_with_reason(empty)
            self.assertIsNone(reason)
            self.assertEqual(0, len(result))

    def test_adapter_filter(self):
        pipeline = FilterPipeline(FilterConfig(strip_adapters=True))
        for sequence in (ADAPTERS[0], reverse_complement(ADAPTERS[1])):
            result, reason = pipeline.process_with_reason(make_record("r", sequence))
            self.assertIsNone(result)
            self.assertEqual(REJECTED_BY_ADAPTER, reason)
        self.assertIsNotNone(FilterPipeline(FilterConfig()).process(make_record("r", ADAPTERS[0])))

    def test_adapter_removed_by_fixed_trim_is_not_seen(self):
        sequence = "AA" + ADAPTERS[0]
        pipeline = FilterPipeline(FilterConfig(strip_adapters=True, trim3=1))
        self.assertIsNotNone(pipeline.process(make_record("r", sequence)))

    def test_n_filter_ignores_quality(self):
        sequence = make_seq(25) + "N" + make_seq(24)
        for config in (FilterConfig(no_n=True),
                       FilterConfig(no_n=True, quality_threshold=20),
                       FilterConfig(no_n=True, quality_threshold=20, use_new_method=True)):
            result, reason = FilterPipeline(config).process_with_reason(make_record("r", sequence))
            self.assertIsNone(result)
            self.assertEqual(REJECTED_BY_N, reason)
        self.assertIsNotNone(FilterPipeline(FilterConfig()).process(make_record("r", sequence)))

    def test_selects_quality_algorithm(self):
        self.assertIsNone(FilterPipeline(FilterConfig()).quality_filter)
        self.assertIsInstance(FilterPipeline(FilterConfig(quality_threshold=20)).quality_filter,
                              StandardQualityFilter)
        self.assertIsInstance(FilterPipeline(FilterConfig(quality_threshold=20, use_new_method=True)).quality_filter,
                              NewMethodQualityFilter)

    def test_quality_rejection(self):
        pipeline = FilterPipeline(FilterConfig(quality_threshold=20))
        result, reason = pipeline.process_with_reason(make_record("r", make_seq(50), [BAD] * 50))
        self.assertIsNone(result)
        self.assertEqual(REJECTED_BY_QUALITY, reason)

    def test_quality_trim_after_fixed_trim(self):
        pipeline = FilterPipeline(FilterConfig(trim5=5, quality_threshold=20))
        record = make_record("r", make_seq(60), [GOOD] * 50 + [BAD] * 10)
        result = pipeline.process(record)
        self.assertEqual(record.seq[5:50], result.seq)
        self.assertEqual(record.qual[5:50], result.qual)
        _assert_consistent(self, result)

    def test_input_record_is_untouched(self):
        record = make_record("r", make_seq(60), [GOOD] * 50 + [BAD] * 10)
        FilterPipeline(FilterConfig(trim5=5, trim3=2, quality_threshold=20)).process(record)
        self.assertEqual(60, len(record))
        _assert_consistent(self, record)


if __name__ == "__main__":
    unittest.main(argv=[""], verbosity=2, exit=False)
