"""Unit tests for ratemeter.demo."""

import sys

import numpy as np
import pytest

from ratemeter import demo
from ratemeter.estimator import RateEstimator, count_samples, average_intervals, insufficient_data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeClock:
    """Simulated clock, advanced by the demo's `sleep`."""
    def __init__(self, t=0.0):
        self.t = t
    def __call__(self):
        return self.t
    def sleep(self, dt):
        self.t += dt


def _run(iterations, interval_ms, window_seconds=1.0, **kwargs):
    clock = FakeClock()
    estimator = RateEstimator(clock=clock)
    lines = []
    results = demo.run_demo(estimator,
                            iterations=iterations,
                            window_seconds=window_seconds,
                            min_interval_ms=interval_ms,
                            max_interval_ms=interval_ms,
                            rng=np.random.default_rng(42),
                            sleep=clock.sleep,
                            output=lines.append,
                            **kwargs)
    return estimator, clock, results, lines


# ---------------------------------------------------------------------------
# format_rate
# ---------------------------------------------------------------------------

class TestFormatRate:
    def test_insufficient_data(self):
        assert "insufficient data" in demo.format_rate(insufficient_data)

    def test_rate(self):
        assert "26.04" in demo.format_rate(26.0417)

    def test_zero(self):
        assert "0.00" in demo.format_rate(0.0)


# ---------------------------------------------------------------------------
# run_demo
# ---------------------------------------------------------------------------

class TestRunDemo:
    def test_one_sample_per_iteration(self):
        estimator, clock, results, lines = _run(iterations=50, interval_ms=40)
        assert len(results) == 50
        assert len(estimator) == 50
        assert clock.t == pytest.approx(50 * 0.040)

    def test_output_lines(self):
        estimator, clock, results, lines = _run(iterations=5, interval_ms=40)
        assert len(lines) == 5
        for i, line in enumerate(lines):
            assert line.startswith(f"Rate sample {i}: ")
        assert "insufficient data" in lines[0]

    def test_silent(self, capsys):
        clock = FakeClock()
        results = demo.run_demo(RateEstimator(clock=clock), iterations=3, sleep=clock.sleep, output=None)
        assert len(results) == 3
        assert capsys.readouterr().out == ""

    def test_warmup_then_estimate(self):
        # Events every 40 ms, 1 s window: the window is bounded once a sample is at least 1 s old.
        estimator, clock, results, lines = _run(iterations=200, interval_ms=40)
        assert all(rate == insufficient_data for rate in results[:25])
        assert all(rate != insufficient_data for rate in results[30:])
        assert results[-1] == pytest.approx(25.0, abs=1.0)

    def test_average_intervals(self):
        estimator, clock, results, lines = _run(iterations=200, interval_ms=40, method=average_intervals)
        assert results[-1] == pytest.approx(25.0, rel=0.1)

    def test_soft(self):
        estimator, clock, results, lines = _run(iterations=200, interval_ms=40, soft=True)
        assert results[-1] == estimator.rolling_estimate

    def test_random_intervals_within_range(self):
        clock = FakeClock()
        estimator = RateEstimator(clock=clock)
        demo.run_demo(estimator, iterations=100, min_interval_ms=33, max_interval_ms=43,
                      rng=np.random.default_rng(0), sleep=clock.sleep, output=None)
        intervals = np.diff(estimator.history)
        assert np.all(intervals >= 0.033 - 1e-9)
        assert np.all(intervals <= 0.043 + 1e-9)

    def test_seeded_runs_are_reproducible(self):
        def history(seed):
            clock = FakeClock()
            estimator = RateEstimator(clock=clock)
            demo.run_demo(estimator, iterations=30, rng=np.random.default_rng(seed), sleep=clock.sleep, output=None)
            return estimator.history
        assert history(7) == history(7)


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------

class TestMain:
    def test_runs(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["ratemeter-demo", "-n", "3", "--min-interval", "0", "--max-interval", "0", "--seed", "1"])
        demo.main()
        out = capsys.readouterr().out
        assert "Rate sample 0:" in out
        assert "Rate sample 2:" in out

    def test_method_option(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["ratemeter-demo", "-n", "2", "-m", "average_intervals", "-s", "-d", "0.9",
                                          "--min-interval", "0", "--max-interval", "0"])
        demo.main()
        assert "Rate sample 1:" in capsys.readouterr().out

    @pytest.mark.parametrize("argv", [["-w", "0"],
                                      ["-w", "nan"],
                                      ["--min-interval", "50", "--max-interval", "40"],
                                      ["-m", "median"]])
    def test_rejects_bad_options(self, monkeypatch, argv):
        monkeypatch.setattr(sys, "argv", ["ratemeter-demo", "-n", "1"] + argv)
        with pytest.raises(SystemExit):
            demo.main()

    def test_methods_table(self):
        assert demo.methods["count_samples"] is count_samples
        assert demo.methods["average_intervals"] is average_intervals
