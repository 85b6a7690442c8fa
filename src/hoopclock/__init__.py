"""hoopclock: a basketball game clock and shot clock."""

__version__ = "0.1.0"
