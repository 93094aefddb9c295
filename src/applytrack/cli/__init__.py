"""Command line interface for applytrack."""
