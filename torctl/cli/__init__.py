"""Command-line interface for torctl."""
