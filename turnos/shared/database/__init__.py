from turnos.shared.database.base import Base, SoftDeleteMixin, TimestampMixin, utcnow
from turnos.shared.database.repository import SQLAlchemyRepository
from turnos.shared.database.session import DatabaseSessionFactory

__all__ = [
    "Base",
    "DatabaseSessionFactory",
    "SQLAlchemyRepository",
    "SoftDeleteMixin",
    "TimestampMixin",
    "utcnow",
]
