"""Command-line interface for the bugreport layer."""
