"""Todo 异常体系

Repository 不向调用方抛出这些异常，而是包装进 Result 返回；
ViewStateAggregator 负责把它们翻译为用户可读的提示。
"""


class TodoError(Exception):
    """Todo 领域基础异常"""

    default_message = "Todo error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class EmptyTitleError(TodoError):
    """标题 trim 后为空"""

    default_message = "Title cannot be empty"


class TodoNotFoundError(TodoError):
    """引用的任务 ID 在变更时不存在"""

    default_message = "Todo not found"

    def __init__(self, task_id: str | None = None) -> None:
        """
        Args:
            task_id: 未找到的任务 ID
        """
        super().__init__()
        self.task_id = task_id


class InvalidQuadrantError(TodoError):
    """象限取值不在四个枚举值之内"""

    default_message = "Invalid quadrant"

    def __init__(self, value: object = None) -> None:
        """
        Args:
            value: 被拒绝的原始取值
        """
        super().__init__()
        self.value = value


class InvalidPriorityError(TodoError):
    """优先级取值不在 1-3 之内"""

    default_message = "Invalid priority"

    def __init__(self, value: object = None) -> None:
        super().__init__()
        self.value = value


class StorageError(TodoError):
    """持久化层的其他失败（连接关闭、磁盘错误、约束冲突等）"""

    default_message = "Storage failure"

    def __init__(self, original_error: Exception) -> None:
        """
        Args:
            original_error: 原始异常
        """
        super().__init__(f"{self.default_message}: {type(original_error).__name__}")
        self.original_error = original_error
