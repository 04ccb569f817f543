"""Command line entry points for the temperature server."""
