"""Configuration for ratemeter.

These are the defaults; `RateEstimator` takes overrides as constructor arguments,
and the demo takes overrides on the command line (run `ratemeter-demo --help`).
"""

# How many successful rate queries between pruning passes over the sample history.
#
# Pruning trims the timestamps that have fallen out of the most recent query window,
# so memory use stays bounded no matter how long the estimator runs. The cadence is
# counted in queries, not in seconds.
cleanup_interval = 1000

# Default trailing window (seconds) for `RateEstimator.query`.
#
# Larger windows give more stable estimates, but smooth out (and thus lose) fast changes
# in the rate.
default_window_seconds = 1.0

# --------------------------------------------------------------------------------
# Demo (`ratemeter-demo`)

demo_iterations = 1000
demo_window_seconds = 3.0

# Random sleep between events, milliseconds, both ends inclusive. The defaults simulate ~26 FPS.
demo_min_interval_ms = 33
demo_max_interval_ms = 43
