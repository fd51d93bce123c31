"""matrixtodo Services -- Repository 与视图状态聚合"""

from .task_repository import TaskRepository
from .view_state import ViewStateAggregator, error_message

__all__ = [
    "TaskRepository",
    "ViewStateAggregator",
    "error_message",
]
