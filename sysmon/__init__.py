"""Host resource monitor with pluggable metric sinks."""

__version__ = "0.1.0"
