"""Estimate an occurrence rate (e.g. FPS) from manually recorded event timestamps.

See `ratemeter.estimator.RateEstimator`.
"""

__version__ = "0.1.0"

__all__ = ["RateEstimator",
           "count_samples", "average_intervals",
           "insufficient_data"]

from .estimator import RateEstimator, count_samples, average_intervals, insufficient_data
