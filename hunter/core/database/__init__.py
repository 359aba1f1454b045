"""
Database infrastructure: declarative base, engine/session service and
subsystem bootstrap.

Import ``DatabaseService`` from ``hunter.core.database.service`` and the
bootstrap helpers from ``hunter.core.database.bootstrap``.
"""

from hunter.core.database.base import Base, IdMixin, TimestampMixin, utc_now

__all__ = ["Base", "IdMixin", "TimestampMixin", "utc_now"]
