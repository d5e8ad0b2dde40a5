#!/usr/bin/env python3
"""
数据模型定义
"""

from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field, replace


class Verdict(Enum):
    """单个测试单元的判定"""
    PASS = "pass"                      # 两个切片等价
    FAIL = "fail"                      # 两个切片不等价，切片工具可能有缺陷
    INCONCLUSIVE = "inconclusive"      # 外部切片工具失败
    NOT_APPLICABLE = "not_applicable"  # 没有可安全变异的位置
    ERROR = "error"                    # 解析失败或找不到切片点

    @property
    def counted(self) -> bool:
        """是否计入蜕变关系的通过率"""
        return self in (Verdict.PASS, Verdict.FAIL)


@dataclass(frozen=True)
class SlicePoint:
    """切片准则：变量名和行号（从1开始）"""
    variable: str
    line: int

    def shifted(self, offset: int) -> 'SlicePoint':
        return replace(self, line=self.line + offset)

    def renamed(self, name: str) -> 'SlicePoint':
        return replace(self, variable=name)

    def __str__(self):
        return f"{self.line}:{self.variable}"


@dataclass
class SliceRun:
    """一次外部切片工具调用的记录"""
    source_file: str
    point: SlicePoint
    command: List[str] = field(default_factory=list)
    exit_code: Optional[int] = None
    output_file: Optional[str] = None
    slice_text: str = ''
    tool_output: str = ''
