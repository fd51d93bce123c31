"""Result -- 成功/失败结果包装

Repository 的变更操作一律返回 Result，不向调用方抛出异常。
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """携带成功值或失败异常的结果"""

    value: T | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def get_or_raise(self) -> T:
        """成功时返回值，失败时抛出携带的异常"""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
