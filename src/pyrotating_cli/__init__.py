"""Command-line tools for PyRotating."""
