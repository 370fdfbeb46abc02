"""Command-line interface for picmark."""
