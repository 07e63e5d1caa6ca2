"""BuzzNet: posts, threaded comments and reactions behind a JWT-guarded API."""

__version__ = "1.0.0"
