"""File system event model, file IDs, a file ID cache and event debouncers."""

__version__ = "0.1.0"