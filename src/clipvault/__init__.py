"""clipvault: clipboard history recorder."""

__version__ = "0.1.0"
