"""Command-line interface for blockcheck."""
