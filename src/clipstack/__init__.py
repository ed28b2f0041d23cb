"""ClipStack: bounded, ordered, deduplicating clipboard history."""

__version__ = "0.1.0"
