"""Command implementations for the edgy CLI."""
