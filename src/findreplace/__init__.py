"""Recursive literal find & replace for Markdown and plain-text files."""

__version__ = "0.1.0"
