"""Boundary layer: database, remote source, local staging and processing backends."""
