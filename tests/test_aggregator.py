"""Tests for result aggregation."""

from __future__ import annotations

from pathlib import Path

import pytest

from audiotally.errors import MalformedFileError
from audiotally.models import Result
from audiotally.pipeline.aggregator import Aggregator, CountMode, aggregate


def _results() -> list[Result]:
    return [
        Result(index=2, duration=30.0),
        Result(index=3, error=MalformedFileError("invalid WAV file"), path=Path("bad.wav")),
        Result(index=0, duration=10.0),
        Result(index=1, duration=20.0),
    ]


class TestAggregate:
    """Test statistics derived from a results stream."""

    @pytest.mark.parametrize("mode", list(CountMode))
    def test_mean_with_one_error(self, mode: CountMode) -> None:
        stats = aggregate(_results(), 4, count_mode=mode)

        assert stats.total_files == 4
        assert stats.total_seconds == pytest.approx(60.0)
        assert stats.success_count == 3
        assert stats.error_count == 1
        assert stats.mean_seconds_per_file == pytest.approx(20.0)

    def test_no_successes(self) -> None:
        stats = aggregate([Result(index=0, error=OSError("nope"))], 1)

        assert stats.success_count == 0
        assert stats.error_count == 1
        assert stats.total_seconds == 0.0
        assert stats.mean_seconds_per_file == 0.0

    def test_zero_length_file_failure_mode(self) -> None:
        """A zero duration without error counts as a success by default."""
        results = [Result(index=0, duration=0.0), Result(index=1, duration=8.0)]

        stats = aggregate(results, 2)

        assert stats.success_count == 2
        assert stats.mean_seconds_per_file == pytest.approx(4.0)

    def test_zero_length_file_duration_mode(self) -> None:
        """Legacy counting ignores zero durations."""
        results = [Result(index=0, duration=0.0), Result(index=1, duration=8.0)]

        stats = aggregate(results, 2, count_mode="duration")

        assert stats.success_count == 1
        assert stats.error_count == 0
        assert stats.mean_seconds_per_file == pytest.approx(8.0)

    def test_counts_never_exceed_total(self) -> None:
        results = [Result(index=i, duration=float(i % 2)) for i in range(10)]
        for mode in CountMode:
            stats = aggregate(results, 10, count_mode=mode)
            assert stats.success_count + stats.error_count <= stats.total_files

    def test_hours_and_minutes(self) -> None:
        stats = aggregate([Result(index=0, duration=7200.0), Result(index=1, duration=3600.0)], 2)

        assert stats.total_hours == pytest.approx(3.0)
        assert stats.mean_hours == pytest.approx(1.5)
        assert stats.mean_minutes == pytest.approx(90.0)


class TestAggregator:
    """Test the duration table bookkeeping."""

    def test_table_is_filled_by_index(self) -> None:
        aggregator = Aggregator(4)
        aggregator.consume(_results())

        assert aggregator.table == [10.0, 20.0, 30.0, 0.0]
        assert aggregator.received == 4

    def test_failures_are_retained(self) -> None:
        aggregator = Aggregator(4)
        aggregator.consume(_results())

        (failure,) = aggregator.failures
        assert failure.index == 3
        assert failure.path == Path("bad.wav")
        assert failure.message == "invalid WAV file"

    def test_early_stops_are_tracked(self) -> None:
        aggregator = Aggregator(2)
        aggregator.consume([Result(index=0, duration=5.0, stopped_early=True), Result(index=1, duration=1.0)])

        assert [result.index for result in aggregator.early_stops] == [0]
        assert aggregator.statistics().success_count == 2

    def test_duplicate_index_rejected(self) -> None:
        aggregator = Aggregator(2)
        aggregator.add(Result(index=0, duration=1.0))

        with pytest.raises(ValueError, match="duplicate"):
            aggregator.add(Result(index=0, duration=1.0))

    def test_out_of_range_index_rejected(self) -> None:
        with pytest.raises(ValueError, match="out of range"):
            Aggregator(1).add(Result(index=5, duration=1.0))

    def test_unknown_count_mode(self) -> None:
        with pytest.raises(ValueError):
            Aggregator(1, count_mode="sometimes")

    def test_missing_results_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        aggregator = Aggregator(3)
        aggregator.consume([Result(index=0, duration=1.0)])

        assert "Expected 3 results, received 1" in caplog.text
