"""Application layer: sync and processing orchestration plus the scheduler."""
