"""Command-line interface adapters."""
