#!/usr/bin/env python3
"""
解析相关异常
"""


class ParseFailure(Exception):
    """Java源代码无法解析（空文本或语法树中存在ERROR/MISSING节点）"""

    def __init__(self, message: str, line: int = 0):
        super().__init__(message)
        self.line = line
