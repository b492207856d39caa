"""CLI commands for ser."""
