"""
docsync: remote document ingestion and processing pipeline.

Mirrors Google Drive documents into local staging, tracks their processing
lifecycle in a relational registry, and advances pending documents through
an external extraction backend on a schedule.
"""

__version__ = "0.1.0"
