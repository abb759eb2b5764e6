"""Shared helpers: logging, errors, text normalization, request coalescing."""
