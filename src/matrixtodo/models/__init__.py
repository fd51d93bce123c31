"""matrixtodo Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import QUADRANT_TITLES, Priority, Quadrant, quadrant_title
from .result import Result
from .task import (
    Task,
    coerce_priority,
    coerce_quadrant,
    create_task,
    from_epoch_ms,
    normalize_timestamp,
    to_epoch_ms,
)
from .view_state import AggregatedViewState, QuadrantState, empty_quadrants

__all__ = [
    # 枚举
    "Quadrant",
    "Priority",
    "QUADRANT_TITLES",
    "quadrant_title",
    # Task
    "Task",
    "create_task",
    "coerce_quadrant",
    "coerce_priority",
    "normalize_timestamp",
    "to_epoch_ms",
    "from_epoch_ms",
    # 视图状态
    "QuadrantState",
    "AggregatedViewState",
    "empty_quadrants",
    # 结果
    "Result",
]
