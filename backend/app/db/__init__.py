"""Declarative base plus every mapped model, so metadata is complete on import."""

from app.db.base import Base
from app.db import models  # noqa: F401

__all__ = ["Base"]
