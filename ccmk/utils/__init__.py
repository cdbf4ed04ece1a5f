"""Shared utilities for ccmk."""
