"""
CRUD operations for database models.

Exports the base CRUD class and the document CRUD with its
pre-instantiated singleton.

Usage:
    from docsync.boundary.db.CRUD import document_crud

    document = await document_crud.get_by_id(db, document_id)
"""

from docsync.boundary.db.CRUD.base_crud import BaseCRUD
from docsync.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
]
