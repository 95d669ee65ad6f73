"""ORM models exposed for metadata discovery."""
from app.db.models.action_log import ActionLog
from app.db.models.assignment import DailyTaskAssignment
from app.db.models.project import Project
from app.db.models.task import Task
from app.db.models.user import User
from app.db.models.user_preferences import UserPreferences

__all__ = [
    "ActionLog",
    "DailyTaskAssignment",
    "Project",
    "Task",
    "User",
    "UserPreferences",
]
