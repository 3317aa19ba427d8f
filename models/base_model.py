#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the Session Auth API.

- UUID primary key (String(36)) generated client-side, so token payloads can
  embed a session id before the row is flushed
- created_at timestamp (client default, server default as fallback)

Sessions are never updated in place, so updated_at lives on the models that
actually change (see models.user.User).
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models: id and created_at.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    def __init__(self, *args, **kwargs):
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if caller passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()
        if getattr(self, "created_at", None) is None:
            self.created_at = utcnow()

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id})"
