#!/usr/bin/env python3
"""
变异相关异常
"""


class MutationError(Exception):
    """变异过程中的可恢复错误基类"""


class NoSafeMutationSite(MutationError):
    """变异器没有找到任何不受保护的可变异位置"""

    def __init__(self, kind: str, reason: str = ''):
        message = f"no eligible {kind} site"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.kind = kind
        self.reason = reason


class LengthInvariantViolation(AssertionError):
    """重命名前后标识符长度不一致，属于变异器自身缺陷，不应被捕获恢复"""

    def __init__(self, old_name: str, new_name: str):
        super().__init__(f"rename changed identifier length: {old_name!r} -> {new_name!r}")
        self.old_name = old_name
        self.new_name = new_name
