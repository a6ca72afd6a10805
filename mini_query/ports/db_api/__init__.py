"""DB-API adapter exports."""

from .database import Database

__all__ = ["Database"]
