"""
Database models package.

Exports:
  - DocumentModel, DocumentStatus: Document ORM model and status enum

Dependencies: sqlalchemy, docsync.boundary.db.base
System role: Database model definitions for the document registry
"""

from docsync.boundary.db.models.document_model import DocumentModel, DocumentStatus

__all__ = [
    "DocumentModel",
    "DocumentStatus",
]
