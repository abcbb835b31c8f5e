"""upcheck — scheduled HTTP uptime checker with a bounded rolling history."""

__version__ = "0.1.0"
