"""Command line interface for contentdb."""
