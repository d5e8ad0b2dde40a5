#!/usr/bin/env python3
"""
切片比较相关异常
"""


class ComparatorError(Exception):
    """切片比较的可恢复错误基类"""


class CanonicalizationMismatch(ComparatorError):
    """两个切片的声明变量数或外部引用数不同，直接判定为不等价"""

    def __init__(self, reason: str, left: int, right: int):
        super().__init__(f"{reason} differs: {left} vs {right}")
        self.reason = reason
        self.left = left
        self.right = right
