"""Activity logging package."""

from church_office.activity.logger import ActivityLogger

__all__ = ["ActivityLogger"]
