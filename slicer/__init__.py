#!/usr/bin/env python3
"""
Slicer包 - 被测切片工具的接口
"""

from .errors import SlicerError, NoSlicePoint, NoProtectedVariable, ExternalToolFailure
from .models import SlicePoint, SliceRun, Verdict
from .slice_point import SlicePointSelector, find_declaration_line, declaration_line_offset
from .executor import SliceExecutor, DEFAULT_COMMAND

# 版本信息
__version__ = "1.0.0"

# 公开的API
__all__ = [
    'SlicerError',
    'NoSlicePoint',
    'NoProtectedVariable',
    'ExternalToolFailure',
    'SlicePoint',
    'SliceRun',
    'Verdict',
    'SlicePointSelector',
    'find_declaration_line',
    'declaration_line_offset',
    'SliceExecutor',
    'DEFAULT_COMMAND',
]

# 包的简介
__doc__ = """
Slicer包负责切片准则的选择和外部切片工具的调用：

主要功能：
- 基于AST的切片点选择（不可达代码中的出现不计入）
- 声明行定位与死代码插入后的行号偏移计算
- 以子进程方式调用被测切片工具并读取输出文件

使用示例：

from slicer import SlicePointSelector, SliceExecutor

point = SlicePointSelector().select(code)
executor = SliceExecutor(jar="sdg-cli.jar")
slice_text = executor.run("Program.java", point.line, point.variable)
"""
