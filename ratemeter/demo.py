"""Demo: estimate the rate of simulated events arriving at random intervals.

Each iteration queries the current rate, sleeps a random number of milliseconds,
and then records an event. With the default settings, the events arrive at ~26 per
second, and the estimate becomes available once three seconds of history exist.

Usage:
    ratemeter-demo [-n ITERATIONS] [-w WINDOW] [-m {count_samples,average_intervals}] [-s] [-d DECAY]
    python -m ratemeter.demo ...
"""

import logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

import argparse
import time
from typing import Callable, List, Optional

from mcpyrate import colorizer

import numpy as np

from unpythonic import sym, timer

from . import __version__
from . import config
from .estimator import RateEstimator, count_samples, average_intervals, insufficient_data

methods = {"count_samples": count_samples,
           "average_intervals": average_intervals}

def format_rate(rate: float) -> str:
    """Format a `RateEstimator.query` result for display."""
    if rate == insufficient_data:
        return colorizer.colorize("insufficient data", colorizer.Fore.YELLOW)
    return colorizer.colorize(f"{rate:0.2f}", colorizer.Style.BRIGHT, colorizer.Fore.GREEN)

def run_demo(estimator: RateEstimator,
             iterations: int = config.demo_iterations,
             window_seconds: float = config.demo_window_seconds,
             soft: bool = False,
             method: sym = count_samples,
             min_interval_ms: int = config.demo_min_interval_ms,
             max_interval_ms: int = config.demo_max_interval_ms,
             rng: Optional[np.random.Generator] = None,
             sleep: Callable[[float], None] = time.sleep,
             output: Optional[Callable[[str], None]] = print) -> List[float]:
    """Drive `estimator` with events at random intervals, querying it once per event.

    `min_interval_ms`, `max_interval_ms`: Range of the random sleep between events, inclusive.
    `rng`: NumPy random generator for the sleep intervals. If `None`, a fresh unseeded one is used.
    `sleep`: Called with the interval in seconds. Override to drive a simulated clock.
    `output`: Called with one line of text per iteration. `None` to run silently.

    Returns the list of query results, one per iteration.
    """
    if rng is None:
        rng = np.random.default_rng()
    results = []
    for i in range(iterations):
        rate = estimator.query(window_seconds, soft=soft, method=method)
        results.append(rate)
        if output is not None:
            output(f"Rate sample {i}: {format_rate(rate)}")
        interval_ms = int(rng.integers(min_interval_ms, max_interval_ms, endpoint=True))
        sleep(interval_ms / 1000)
        estimator.add_sample()
    return results

def main() -> None:
    parser = argparse.ArgumentParser(description="""Estimate the rate of simulated events arriving at random intervals.""",
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("-n", "--iterations", dest="iterations", default=config.demo_iterations, type=int, metavar="n", help=f"Number of events to simulate (default {config.demo_iterations}).")
    parser.add_argument("-w", "--window", dest="window_seconds", default=config.demo_window_seconds, type=float, metavar="seconds", help=f"Length of the trailing estimation window (default {config.demo_window_seconds}).")
    parser.add_argument("-m", "--method", dest="method", default="count_samples", choices=list(methods.keys()), help="Estimation method (default count_samples).")
    parser.add_argument("-s", "--soft", dest="soft", action="store_true", default=False, help="Print the rolling (smoothed) estimate instead of the instantaneous one.")
    parser.add_argument("-d", "--decay", dest="decay_factor", default=0.0, type=float, metavar="x", help="Decay factor for the rolling estimate, in [0, 1) (default 0.0, no smoothing).")
    parser.add_argument("--min-interval", dest="min_interval_ms", default=config.demo_min_interval_ms, type=int, metavar="ms", help=f"Shortest time between events (default {config.demo_min_interval_ms}).")
    parser.add_argument("--max-interval", dest="max_interval_ms", default=config.demo_max_interval_ms, type=int, metavar="ms", help=f"Longest time between events (default {config.demo_max_interval_ms}).")
    parser.add_argument("--seed", dest="seed", default=None, type=int, metavar="x", help="Random seed, for reproducible intervals.")
    parser.add_argument('-v', '--version', action='version', version=('%(prog)s ' + __version__))
    opts = parser.parse_args()

    if not opts.window_seconds > 0:
        parser.error(f"--window must be positive, got {opts.window_seconds}")
    if not (0 <= opts.min_interval_ms <= opts.max_interval_ms):
        parser.error(f"need 0 <= --min-interval <= --max-interval, got {opts.min_interval_ms} and {opts.max_interval_ms}")

    logger.info(f"Ratemeter-demo version {__version__}")

    estimator = RateEstimator()
    estimator.set_decay_factor(opts.decay_factor)
    with timer() as tim:
        run_demo(estimator,
                 iterations=opts.iterations,
                 window_seconds=opts.window_seconds,
                 soft=opts.soft,
                 method=methods[opts.method],
                 min_interval_ms=opts.min_interval_ms,
                 max_interval_ms=opts.max_interval_ms,
                 rng=np.random.default_rng(opts.seed))
    logger.info(f"Simulated {opts.iterations} events in {tim.dt:0.6g}s.")

if __name__ == "__main__":
    main()
