"""Command-line interface for trustchain."""
