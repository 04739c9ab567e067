"""InkPact dashboard: file-backed content collections for blogs, books and profiles."""

__version__ = "1.0.0"
