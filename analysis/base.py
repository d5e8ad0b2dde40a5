#!/usr/bin/env python3
"""
基础分析器模块

提供程序分析的基础类和接口
"""

from typing import Union

from parser import JavaProgram


class BaseAnalyzer:
    """基础分析器"""

    def load(self, program: Union[str, JavaProgram]) -> JavaProgram:
        """
        统一输入：源代码文本会被解析为JavaProgram
        Raises:
            ParseFailure: 源代码无法解析
        """
        if isinstance(program, JavaProgram):
            return program
        return JavaProgram.parse(program)
