from .models import Task, TaskCreate, TaskUpdate, ErrorMessage

__all__ = ["Task", "TaskCreate", "TaskUpdate", "ErrorMessage"]
