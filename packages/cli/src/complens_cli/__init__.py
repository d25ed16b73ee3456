"""Command-line interface for complens."""
