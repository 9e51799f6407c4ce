"""Command-line entry point for kubedeck."""
