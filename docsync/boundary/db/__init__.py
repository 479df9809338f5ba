"""
Database boundary layer: ORM models, CRUD operations, connection management
and the transactional document registry.

Exports:
  - Base, IntegerIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - create_tables(): Schema bootstrap
  - DocumentModel, DocumentStatus: Registry entity and lifecycle enum
  - DocumentCRUD, document_crud: Session-level queries
  - DocumentRegistry, UpsertResult: Transactional lifecycle store

Dependencies: sqlalchemy, docsync.configs
System role: Database adapter providing the single source of truth for
document discovery and processing state.
"""

from docsync.boundary.db.base import Base, IntegerIDMixin, TimestampMixin
from docsync.boundary.db.connection import (
    create_tables,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from docsync.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsync.boundary.db.CRUD import BaseCRUD, DocumentCRUD, document_crud
from docsync.boundary.db.document_registry import (
    ALLOWED_TRANSITIONS,
    DocumentRegistry,
    UpsertResult,
)

__all__ = [
    # Base classes
    "Base",
    "IntegerIDMixin",
    "TimestampMixin",
    # Connection
    "create_tables",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DocumentModel",
    "DocumentStatus",
    # CRUD
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    # Registry
    "ALLOWED_TRANSITIONS",
    "DocumentRegistry",
    "UpsertResult",
]
