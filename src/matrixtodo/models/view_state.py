"""视图状态模型 -- 派生数据，不持久化"""

from pydantic import BaseModel, Field

from .enums import Quadrant, quadrant_title
from .task import Task


class QuadrantState(BaseModel):
    """单个象限的展示状态"""

    quadrant: Quadrant = Field(description="象限")
    title: str = Field(description="象限展示标题")
    tasks: list[Task] = Field(default_factory=list, description="过滤、排序后的任务")


def empty_quadrants() -> list[QuadrantState]:
    """四个空象限，按枚举顺序"""
    return [QuadrantState(quadrant=q, title=quadrant_title(q)) for q in Quadrant]


class AggregatedViewState(BaseModel):
    """聚合视图状态：四个象限 + 加载标记 + 错误提示"""

    quadrants: list[QuadrantState] = Field(default_factory=empty_quadrants)
    is_loading: bool = Field(default=False, description="首次组合前为 True")
    error: str | None = Field(default=None, description="用户可读的错误提示")

    def bucket(self, quadrant: Quadrant) -> QuadrantState:
        """按象限取出对应的 QuadrantState"""
        for state in self.quadrants:
            if state.quadrant == quadrant:
                return state
        raise KeyError(quadrant)
