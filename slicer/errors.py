#!/usr/bin/env python3
"""
切片相关异常
"""

from typing import List, Optional


class SlicerError(Exception):
    """切片点选择与外部切片工具调用的可恢复错误基类"""


class NoSlicePoint(SlicerError):
    """切片点选择策略的所有回退步骤都没有找到变量"""


# 程序中没有任何可作为切片种子的变量
NoProtectedVariable = NoSlicePoint


class ExternalToolFailure(SlicerError):
    """外部切片工具非零退出、超时、无法启动或没有产生输出文件"""

    def __init__(self, message: str, exit_code: Optional[int] = None, output: str = '',
                 checked_paths: Optional[List[str]] = None):
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output
        self.checked_paths = checked_paths or []
