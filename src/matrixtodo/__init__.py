"""matrixtodo -- Eisenhower 矩阵待办事项的响应式状态层"""

__version__ = "0.1.0"
