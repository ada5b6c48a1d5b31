"""Estimate an occurrence rate from manually recorded samples.

Rather than sampling with a fixed timer, the caller calls `RateEstimator.add_sample`
whenever the tracked event happens (e.g. a frame is rendered), and `RateEstimator.query`
whenever it wants to know the current rate. For example::

    fps = RateEstimator()
    while True:
        render_frame()
        fps.add_sample()
        rate = fps.query(2.0)  # occurrence rate over the past 2 seconds
        if rate != insufficient_data:
            print(f"{rate:0.2f} FPS")

This module is licensed under the 2-clause BSD license.
"""

__all__ = ["RateEstimator",
           "count_samples", "average_intervals",
           "insufficient_data"]

import logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

import contextlib
import threading
import time
from typing import Callable, List

from unpythonic import sym

from . import config

# --------------------------------------------------------------------------------
# Estimation methods

count_samples = sym("count_samples")  # count samples in the window; quantized, good for low or bursty rates
average_intervals = sym("average_intervals")  # invert the average inter-sample interval; continuous, good for high smooth rates

_methods = (count_samples, average_intervals)

# Returned by `RateEstimator.query` when there is not (yet) enough history to fill the window.
insufficient_data = -1.0

# --------------------------------------------------------------------------------
# Estimator

class RateEstimator:
    """Windowed occurrence rate estimator, for things like FPS (frames per second) counters."""
    def __init__(self,
                 clock: Callable[[], float] = time.monotonic,
                 synchronized: bool = True,
                 cleanup_interval: int = config.cleanup_interval):
        """Create an estimator with an empty sample history.

        `clock`: Zero-argument callable, returning the current time in seconds.
                 The default is a steady clock, so the estimate is unaffected by
                 adjustments of the system wall clock. Override e.g. for testing.
        `synchronized`: If `True`, all operations on this instance are serialized
                        with a lock, so that `add_sample` and `query` can be called
                        from different threads.

                        If you only ever use the instance from one thread, you can
                        set this to `False` to skip the locking overhead.
        `cleanup_interval`: Prune stale samples from the history once every this many
                            successful queries.

        The estimator starts with an empty history and no smoothing (decay factor 0).
        """
        self.clock = clock
        self.synchronized = synchronized
        self.cleanup_interval = cleanup_interval

        self.history: List[float] = []  # timestamps, oldest first
        self.rolling_estimate = 0.0
        self.decay_factor = 0.0
        self.cleanup_counter = 0  # successful queries since last pruning pass

        if synchronized:
            self.lock = threading.Lock()
        else:
            self.lock = contextlib.nullcontext()

    def __len__(self) -> int:
        """Return the number of samples currently stored."""
        return len(self.history)

    def set_decay_factor(self, value: float) -> None:
        """Set the weight of the previous rolling estimate in the soft estimate.

        0 means no smoothing: the soft estimate is just the latest measurement.
        Values close to 1 make the soft estimate change slowly. The sane range
        is [0, 1); it is not enforced.
        """
        self.decay_factor = value

    def add_sample(self) -> None:
        """Record that the tracked event happened now."""
        with self.lock:
            # Read the clock inside the critical section, so that concurrent appends stay in chronological order.
            self.history.append(self.clock())

    def reset(self) -> None:
        """Discard the sample history.

        The decay factor and the rolling estimate are kept.
        """
        with self.lock:
            self.history.clear()
        logger.debug("RateEstimator.reset: sample history cleared.")

    def query(self, window_seconds: float = config.default_window_seconds, soft: bool = False, method: sym = count_samples) -> float:
        """Estimate the occurrence rate over the past `window_seconds` seconds (ending now).

        Larger windows give more stable estimates, but smooth out (and thus lose)
        fast changes in the rate.

        `window_seconds`: Size of the trailing time window to examine, in seconds. Must be positive.
        `soft`: If `True`, return the rolling (exponentially smoothed) estimate instead of the
                instantaneous one. Either way, every successful query updates the rolling estimate.
                See `set_decay_factor`.
        `method`: One of:
                      `count_samples`: Number of samples in the window, divided by the window size.
                                       Quantized to whole samples; better when the rate is low or bursty.
                      `average_intervals`: Inverse of the average interval between the samples in the window.
                                           Continuous; better when the rate is high and steady.

        Returns the rate estimate in events per second, or `insufficient_data` (a negative value)
        if the history does not yet span the whole window. A failed query does not affect the
        rolling estimate.

        A sample is inside the window if its age is strictly less than `window_seconds`; a sample
        exactly at the window edge is outside.
        """
        if not any(method is m for m in _methods):
            # contract violation by the caller
            raise AssertionError(f"RateEstimator.query: Unknown value for `method`: {method}; valid: {_methods}")
        if not window_seconds > 0:  # also rejects NaN
            raise ValueError(f"RateEstimator.query: `window_seconds` must be positive, got {window_seconds}")

        with self.lock:
            history = self.history
            if len(history) < 2:  # a single sample cannot bound a window
                return insufficient_data

            now = self.clock()
            i = len(history) - 1
            while i >= 0 and now - history[i] < window_seconds:
                i -= 1
            if i < 0:  # ran out of history before reaching the start of the window
                return insufficient_data
            # Now `history[i]` is the newest sample outside the window, and `history[i + 1:]` are inside it.
            n = len(history) - (i + 1)

            if method is count_samples:
                estimate = n / window_seconds
            else:  # method is average_intervals
                if n < 2:
                    return insufficient_data
                elapsed = history[-1] - history[i + 1]
                if elapsed <= 0.0:  # all samples in the window have the same timestamp
                    return insufficient_data
                average_interval = elapsed / n
                estimate = 1.0 / average_interval
                logger.debug(f"RateEstimator.query: average interval {average_interval:0.6g}s over {elapsed:0.6g}s.")
            logger.debug(f"RateEstimator.query: {n} samples in {window_seconds:0.6g}s window, anchor age {now - history[i]:0.6g}s => {estimate:0.6g}/s ({method}).")

            self.cleanup_counter += 1
            if self.cleanup_counter >= self.cleanup_interval:
                self.cleanup_counter = 0
                self._prune(i)

            self.rolling_estimate = self.decay_factor * self.rolling_estimate + (1.0 - self.decay_factor) * estimate
            if soft:
                return self.rolling_estimate
        return estimate

    def _prune(self, anchor: int) -> None:
        """Discard the samples older than `history[anchor]`. The caller must hold the lock.

        `anchor` is the index of the newest sample outside the latest query window. It is kept,
        so that an immediately following query over the same window still has its start bounded.
        """
        if anchor > 0:
            logger.debug(f"RateEstimator._prune: discarding {anchor} old samples, keeping {len(self.history) - anchor}.")
            del self.history[:anchor]
