"""Core domain layer: exception taxonomy."""
