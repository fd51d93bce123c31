"""枚举定义

包含 Eisenhower 四象限 Quadrant、任务优先级 Priority，
以及象限到展示标题的固定映射 QUADRANT_TITLES。
"""

from enum import IntEnum, StrEnum


class Quadrant(StrEnum):
    """Eisenhower 矩阵四象限，值即持久化的枚举名"""

    URGENT_IMPORTANT = "URGENT_IMPORTANT"
    NOT_URGENT_IMPORTANT = "NOT_URGENT_IMPORTANT"
    URGENT_NOT_IMPORTANT = "URGENT_NOT_IMPORTANT"
    NOT_URGENT_NOT_IMPORTANT = "NOT_URGENT_NOT_IMPORTANT"


class Priority(IntEnum):
    """任务优先级，持久化为 1-3 的小整数"""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


QUADRANT_TITLES: dict[Quadrant, str] = {
    Quadrant.URGENT_IMPORTANT: "Do First",
    Quadrant.NOT_URGENT_IMPORTANT: "Schedule",
    Quadrant.URGENT_NOT_IMPORTANT: "Delegate",
    Quadrant.NOT_URGENT_NOT_IMPORTANT: "Eliminate",
}


def quadrant_title(quadrant: Quadrant) -> str:
    """返回象限的展示标题"""
    return QUADRANT_TITLES[quadrant]
