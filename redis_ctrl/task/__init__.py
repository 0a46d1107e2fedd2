"""Task tracking module for redis-ctrl."""

from .service import TaskService

__all__ = ["TaskService"]
