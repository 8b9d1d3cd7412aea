from sowcal.models.task import Task

__all__ = [
    "Task",
]
