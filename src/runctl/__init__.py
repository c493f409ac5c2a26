"""runctl — run, kill, and inspect services on a local or remote runtime."""

__version__ = "0.1.0"
