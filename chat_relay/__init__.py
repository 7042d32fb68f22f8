"""Chat relay: forwards frontend conversations to an LLM provider."""

__version__ = "1.0.0"
