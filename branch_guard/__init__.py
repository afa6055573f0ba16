"""Pull request branch guard."""

__version__ = "0.1.0"
