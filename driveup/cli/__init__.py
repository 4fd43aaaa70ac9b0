"""Command-line interface for driveup."""
