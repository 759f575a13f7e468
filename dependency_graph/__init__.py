"""Generate, upload, retrieve and submit dependency graphs in GitHub Actions jobs."""

__version__ = "1.0.0"
