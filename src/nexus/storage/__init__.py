"""Storage layer: SQLAlchemy schema, engine, and persistence adapters."""

from nexus.storage.engine import create_nexus_engine, create_session_factory, init_db
from nexus.storage.persistence import MemoryPersistence, SqlitePersistence, StateSaver
from nexus.storage.schema import Base, ContextStateRow, ErrorRecordRow, NexusMetaRow

__all__ = [
    "create_nexus_engine",
    "create_session_factory",
    "init_db",
    "SqlitePersistence",
    "MemoryPersistence",
    "StateSaver",
    "Base",
    "ContextStateRow",
    "ErrorRecordRow",
    "NexusMetaRow",
]
