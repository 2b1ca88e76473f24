"""reportflow — multi-agent report writing on an event-routed step runner."""

__version__ = "0.1.0"
