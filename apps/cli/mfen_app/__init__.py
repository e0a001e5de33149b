"""Command line and HTTP entry points for MFEN."""
