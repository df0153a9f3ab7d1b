"""Track a working day as a sequence of named flow intervals."""

__version__ = "0.1.0"
