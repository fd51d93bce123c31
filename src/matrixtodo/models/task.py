"""Task Domain Model

tasks 表中的一行对应一个 Task。
时间戳统一为带时区的 UTC datetime，精度截断到毫秒，
与持久化的整数毫秒时间戳一一对应。
"""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field, field_validator
from ulid import ULID

from ..exceptions import EmptyTitleError, InvalidPriorityError, InvalidQuadrantError
from .enums import Priority, Quadrant

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def normalize_timestamp(value: datetime) -> datetime:
    """转为 UTC 并截断到毫秒；naive datetime 视为 UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def to_epoch_ms(value: datetime) -> int:
    """datetime -> Unix 毫秒时间戳"""
    return (normalize_timestamp(value) - _EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(value: int) -> datetime:
    """Unix 毫秒时间戳 -> UTC datetime"""
    return _EPOCH + timedelta(milliseconds=int(value))


def coerce_quadrant(value: Quadrant | str) -> Quadrant:
    """将枚举或枚举名转为 Quadrant

    Raises:
        InvalidQuadrantError: 取值不是四个象限之一
    """
    if isinstance(value, Quadrant):
        return value
    try:
        return Quadrant(value)
    except ValueError:
        raise InvalidQuadrantError(value) from None


def coerce_priority(value: Priority | int) -> Priority:
    """将枚举或 1-3 的整数转为 Priority

    Raises:
        InvalidPriorityError: 取值超出范围
    """
    try:
        return Priority(value)
    except ValueError:
        raise InvalidPriorityError(value) from None


class Task(BaseModel):
    """Task 数据模型

    id 创建后不可变更；title 仅在创建时校验非空；
    created_at 只在构造时写入一次。
    """

    id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    is_completed: bool = Field(default=False, description="是否已完成")
    quadrant: Quadrant = Field(description="所属象限")
    created_at: datetime = Field(description="创建时间")
    due_date: datetime | None = Field(default=None, description="截止时间")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")

    @field_validator("created_at", "due_date")
    @classmethod
    def _normalize_timestamps(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return normalize_timestamp(value)


def create_task(
    title: str,
    description: str = "",
    quadrant: Quadrant | str = Quadrant.URGENT_IMPORTANT,
    due_date: datetime | None = None,
    priority: Priority | int = Priority.MEDIUM,
    now: datetime | None = None,
) -> Task:
    """构造新任务：trim 标题和描述，生成 ID 与创建时间

    Raises:
        EmptyTitleError: 标题 trim 后为空
        InvalidQuadrantError: 象限取值非法
        InvalidPriorityError: 优先级取值非法
    """
    title = title.strip()
    if not title:
        raise EmptyTitleError()

    return Task(
        id=str(ULID()),
        title=title,
        description=description.strip(),
        quadrant=coerce_quadrant(quadrant),
        created_at=now or datetime.now(UTC),
        due_date=due_date,
        priority=coerce_priority(priority),
    )
