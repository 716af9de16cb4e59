"""Bidirectional sync between folders of Markdown notes and Google Docs."""

__version__ = "0.1.0"
