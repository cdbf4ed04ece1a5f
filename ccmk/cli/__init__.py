"""Command line interface for ccmk."""
