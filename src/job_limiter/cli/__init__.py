"""job-limiter command-line interface (``job-limiter``)."""
