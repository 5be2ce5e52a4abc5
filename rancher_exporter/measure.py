"""
Internal Instrumentation

Counters and histograms describing the exporter itself, registered on the
default prometheus_client registry.
"""

from contextlib import contextmanager
import time

from prometheus_client import Counter, Histogram

FUNCTION_COUNT = Counter(
    'rancher_exporter_function_count_total',
    'Number of times a function was called',
    labelnames=['pkg', 'fnc']
)

FUNCTION_DURATIONS = Histogram(
    'rancher_exporter_function_durations_microseconds',
    'Function duration in microseconds',
    labelnames=['pkg', 'fnc'],
    buckets=(1000, 5000, 10000, 50000, 100000, 250000, 500000,
             1000000, 2500000, 5000000, 10000000)
)

FETCH_ERRORS = Counter(
    'rancher_exporter_fetch_errors_total',
    'Number of endpoint fetches abandoned for a scrape cycle',
    labelnames=['endpoint', 'kind']
)


@contextmanager
def measured(pkg: str, fnc: str):
    """Count a call and record its duration, also when it raises."""
    FUNCTION_COUNT.labels(pkg=pkg, fnc=fnc).inc()
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = (time.perf_counter() - start) * 1_000_000
        FUNCTION_DURATIONS.labels(pkg=pkg, fnc=fnc).observe(elapsed)
