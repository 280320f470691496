"""EC2 console: list, filter and start/stop EC2 instances."""

__version__ = "1.0.0"
