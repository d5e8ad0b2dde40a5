#!/usr/bin/env python3
"""
Parser包 - 基于tree-sitter的Java程序门面

主要功能：
- 解析Java编译单元或语句片段，语法错误时抛出ParseFailure
- 打印、先序遍历、结构化改写（保留未改动区域的原始布局）
- 变量绑定枚举与作用域查询

使用示例：
   program = JavaProgram.parse(code)
   for binding in program.bindings():
       print(binding.name, binding.line)
   new_code = program.rewrite(lambda node, render: None)
"""

from .errors import ParseFailure
from .java_program import (
    JavaProgram, VariableBinding, Scope, STATEMENT_TYPES, BLOCK_TYPES, LOOP_TYPES,
    COMMENT_TYPES, binding_kind, is_variable_reference, node_key, structure,
)
from .utils import text, line_of, same_node, unwrap_parens

__all__ = [
    'ParseFailure',
    'JavaProgram',
    'VariableBinding',
    'Scope',
    'STATEMENT_TYPES',
    'BLOCK_TYPES',
    'LOOP_TYPES',
    'COMMENT_TYPES',
    'binding_kind',
    'is_variable_reference',
    'node_key',
    'structure',
    'text',
    'line_of',
    'same_node',
    'unwrap_parens',
]
