"""Building blocks for streaming LLM agents: event streams, aggregation, test helpers and an in-memory WAL."""

__version__ = "0.1.0"