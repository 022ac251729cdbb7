"""Background task execution."""

from aicon.tasks.spawner import AsyncioTaskSpawner, InlineTaskSpawner, TaskSpawner

__all__ = ["AsyncioTaskSpawner", "InlineTaskSpawner", "TaskSpawner"]
