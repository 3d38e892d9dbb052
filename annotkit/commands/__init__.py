"""Command implementations backing the CLI."""
