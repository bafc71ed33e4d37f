"""Job intake and enrichment pipeline for chat/channel job feeds."""

__version__ = "0.1.0"
