"""Command-line entry points for gcal."""
